# src/teamtask/activity/activity_store.py

"""
Append-only activity log.

The API does not record entries yet; the store exists so the table and its
indexes are created with the rest of the schema and can be queried by tools.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..core.db import Database
from ..errors import StorageError

logger = logging.getLogger(__name__)


class ActivityAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class EntityType(StrEnum):
    TASK = "task"
    USER = "user"


@dataclass(frozen=True, slots=True)
class ActivityEntry:
    id: int
    action: ActivityAction
    entity_type: EntityType
    entity_id: int
    user_id: int
    changes: dict[str, Any]
    description: str
    ip_address: str | None
    user_agent: str | None
    created_at: float
    updated_at: float


class ActivityStore:
    def __init__(self, db: Database) -> None:
        self._db = db

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> ActivityEntry:
        try:
            changes = json.loads(row["changes"] or "{}")
        except ValueError:
            changes = {}
        return ActivityEntry(
            id=int(row["id"]),
            action=ActivityAction(row["action"]),
            entity_type=EntityType(row["entity_type"]),
            entity_id=int(row["entity_id"]),
            user_id=int(row["user_id"]),
            changes=changes if isinstance(changes, dict) else {},
            description=str(row["description"]),
            ip_address=row["ip_address"],
            user_agent=row["user_agent"],
            created_at=float(row["created_at"]),
            updated_at=float(row["updated_at"]),
        )

    def add_entry(
        self,
        *,
        action: ActivityAction,
        entity_type: EntityType,
        entity_id: int,
        user_id: int,
        description: str,
        changes: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> int:
        if not description or not description.strip():
            raise ValueError("description is required")
        now = time.time()
        with self._db.connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO activity_logs(
                    action, entity_type, entity_id, user_id, changes,
                    description, ip_address, user_agent, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    action.value,
                    entity_type.value,
                    int(entity_id),
                    int(user_id),
                    json.dumps(changes or {}, ensure_ascii=False, default=str),
                    description.strip(),
                    ip_address,
                    user_agent,
                    now,
                    now,
                ),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError("SQLite did not return lastrowid for activity insert")
            return int(rowid)

    def list_for_entity(
        self, entity_type: EntityType, entity_id: int, limit: int = 50
    ) -> list[ActivityEntry]:
        """Newest first."""
        with self._db.connect() as conn:
            rows = conn.execute(
                """
                SELECT *
                FROM activity_logs
                WHERE entity_type = ? AND entity_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (entity_type.value, int(entity_id), int(limit)),
            ).fetchall()
            return [self._row_to_entry(r) for r in rows]
