# tests/test_paging.py

from __future__ import annotations

from teamtask.core.db import SQLITE_MAX_INT
from teamtask.core.paging import DEFAULT_LIMIT, MAX_LIMIT, MAX_PAGE, Page, Pagination


def test_from_query_is_lenient() -> None:
    p = Pagination.from_query("abc", "", "  ")
    assert (p.page, p.limit, p.sort) == (1, DEFAULT_LIMIT, "-createdAt")

    p = Pagination.from_query("0", "1000", "dueDate")
    assert (p.page, p.limit, p.sort) == (1, MAX_LIMIT, "dueDate")


def test_huge_page_is_clamped_to_a_bindable_offset() -> None:
    p = Pagination.from_query("99999999999999999999", str(MAX_LIMIT))
    assert p.page == MAX_PAGE
    assert 0 <= p.offset <= SQLITE_MAX_INT


def test_page_links() -> None:
    page = Page(items=[], total_count=25, page=2, limit=10)
    assert page.has_next and page.has_prev
    assert not Page(items=[], total_count=20, page=2, limit=10).has_next
