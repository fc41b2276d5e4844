# src/teamtask/core/paging.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
# Keeps (page - 1) * limit inside SQLite's signed 64-bit OFFSET.
MAX_PAGE = (2**63 - 1) // MAX_LIMIT


@dataclass(slots=True)
class Pagination:
    page: int = 1
    limit: int = DEFAULT_LIMIT
    sort: str = "-createdAt"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_query(
        cls,
        page: Any = None,
        limit: Any = None,
        sort: str | None = None,
    ) -> Pagination:
        """Lenient parse of ?page=&limit= (bad values fall back to defaults)."""
        p = _to_int(page, 1)
        lim = _to_int(limit, DEFAULT_LIMIT)
        return cls(
            page=max(1, min(MAX_PAGE, p)),
            limit=max(1, min(MAX_LIMIT, lim)),
            sort=(sort or "").strip() or "-createdAt",
        )


@dataclass(slots=True)
class Page:
    items: list = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total_count

    @property
    def has_prev(self) -> bool:
        return self.page > 1


def _to_int(raw: Any, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default
