# src/teamtask/tasks/task_store.py

from __future__ import annotations

import json
import logging
import sqlite3
import time
from typing import Any

from ..core.db import Database, is_row_id
from ..errors import StorageError
from .task_models import (
    PRIORITY_RANK,
    Task,
    TaskFilters,
    TaskPatch,
    TaskPriority,
    TaskStats,
    TaskStatus,
    compute_overdue,
)

logger = logging.getLogger(__name__)

_PRIORITY_SQL = (
    "CASE priority "
    + " ".join(f"WHEN '{p.value}' THEN {rank}" for p, rank in PRIORITY_RANK.items())
    + " ELSE 1 END"
)

SORT_COLUMNS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "dueDate": "due_at",
    "priority": _PRIORITY_SQL,
    "title": "title COLLATE NOCASE",
    "status": "status",
}


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def order_by_clause(sort: str) -> str:
    """
    Translate "-createdAt" style keys into ORDER BY; unknown keys fall back
    to most-recent-first. Ties break on id in the same direction.
    """
    key = (sort or "").strip()
    direction = "ASC"
    if key.startswith("-"):
        direction = "DESC"
        key = key[1:]
    column = SORT_COLUMNS.get(key)
    if column is None:
        column, direction = "created_at", "DESC"
    return f"ORDER BY {column} {direction}, id {direction}"


class TaskStore:
    """
    SQLite task store.

    Tags are stored as a JSON array. is_overdue is written on every insert and
    update; reads never recompute it.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    @staticmethod
    def _tags_to_str(tags: list[str] | None) -> str:
        return json.dumps(list(tags or []), ensure_ascii=False)

    @staticmethod
    def _str_to_tags(s: str | None) -> list[str]:
        if not s:
            return []
        try:
            val = json.loads(s)
        except ValueError:
            logger.warning("Corrupt tags column ignored: %r", s)
            return []
        return [str(t) for t in val] if isinstance(val, list) else []

    def _row_to_task(self, row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=str(row["title"]),
            description=str(row["description"]),
            status=TaskStatus.from_db(row["status"]),
            priority=TaskPriority.from_db(row["priority"]),
            due_at=float(row["due_at"]),
            assignee_id=int(row["assignee_id"]),
            created_by_id=int(row["created_by_id"]),
            tags=self._str_to_tags(row["tags"]),
            is_overdue=bool(row["is_overdue"]),
            created_at=float(row["created_at"]),
            updated_at=float(row["updated_at"]),
        )

    @staticmethod
    def _where(assignee_id: int | None, filters: TaskFilters | None) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []

        if assignee_id is not None:
            clauses.append("assignee_id = ?")
            params.append(int(assignee_id))

        if filters is not None:
            if filters.search:
                for term in filters.search.split():
                    pattern = f"%{_escape_like(term)}%"
                    clauses.append(
                        "(title LIKE ? ESCAPE '\\' OR description LIKE ? ESCAPE '\\')"
                    )
                    params.extend([pattern, pattern])
            if filters.status is not None:
                clauses.append("status = ?")
                params.append(filters.status.value)
            if filters.priority is not None:
                clauses.append("priority = ?")
                params.append(filters.priority.value)

        if not clauses:
            return "", params
        return "WHERE " + " AND ".join(clauses), params

    # ---- reads ----

    def get_task(self, task_id: int) -> Task | None:
        if not is_row_id(int(task_id)):
            return None
        with self._db.connect() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),)).fetchone()
            return self._row_to_task(row) if row else None

    def count_tasks(
        self,
        *,
        assignee_id: int | None = None,
        filters: TaskFilters | None = None,
    ) -> int:
        where, params = self._where(assignee_id, filters)
        with self._db.connect() as conn:
            (n,) = conn.execute(f"SELECT COUNT(*) FROM tasks {where}", params).fetchone()
            return int(n)

    def list_tasks(
        self,
        *,
        assignee_id: int | None = None,
        filters: TaskFilters | None = None,
        sort: str = "-createdAt",
        limit: int = 10,
        offset: int = 0,
    ) -> list[Task]:
        """
        List tasks matching the scope and filters.

        assignee_id restricts to a single assignee (member scope); None means all.
        """
        where, params = self._where(assignee_id, filters)
        sql = f"SELECT * FROM tasks {where} {order_by_clause(sort)} LIMIT ? OFFSET ?"
        with self._db.connect() as conn:
            rows = conn.execute(sql, [*params, int(limit), int(offset)]).fetchall()
            return [self._row_to_task(r) for r in rows]

    def stats(self, *, assignee_id: int | None = None) -> TaskStats:
        where, params = self._where(assignee_id, None)
        with self._db.connect() as conn:
            row = conn.execute(
                f"""
                SELECT
                    COUNT(*) AS total,
                    COALESCE(SUM(CASE WHEN status = 'completed' THEN 1 ELSE 0 END), 0) AS completed,
                    COALESCE(SUM(CASE WHEN status != 'completed' THEN 1 ELSE 0 END), 0) AS pending,
                    COALESCE(SUM(is_overdue), 0) AS overdue
                FROM tasks {where}
                """,
                params,
            ).fetchone()
            return TaskStats(
                total=int(row["total"]),
                completed=int(row["completed"]),
                pending=int(row["pending"]),
                overdue=int(row["overdue"]),
            )

    # ---- writes ----

    def add_task(
        self,
        *,
        title: str,
        description: str,
        due_at: float,
        assignee_id: int,
        created_by_id: int,
        status: TaskStatus = TaskStatus.TODO,
        priority: TaskPriority = TaskPriority.MEDIUM,
        tags: list[str] | None = None,
        now_ts: float | None = None,
    ) -> int:
        if now_ts is None:
            now_ts = time.time()
        is_overdue = compute_overdue(due_at, status, now_ts)

        with self._db.connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO tasks(
                    title, description, status, priority, due_at,
                    assignee_id, created_by_id, tags, is_overdue,
                    created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    title,
                    description,
                    status.value,
                    priority.value,
                    float(due_at),
                    int(assignee_id),
                    int(created_by_id),
                    self._tags_to_str(tags),
                    1 if is_overdue else 0,
                    now_ts,
                    now_ts,
                ),
            )
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)

        logger.debug(
            "Task added id=%s assignee=%s status=%s overdue=%s",
            task_id,
            assignee_id,
            status.value,
            is_overdue,
        )
        return task_id

    def update_task(
        self,
        task_id: int,
        patch: TaskPatch,
        *,
        expected_assignee_id: int | None = None,
        now_ts: float | None = None,
    ) -> bool:
        """
        Apply a patch and recompute is_overdue in one UPDATE statement.

        The overdue flag is computed from the patched values where given and the
        stored values otherwise. With expected_assignee_id the row is only
        touched if its assignee is still that user.

        Returns True if exactly one row was updated.
        """
        if now_ts is None:
            now_ts = time.time()

        fields: list[str] = []
        params: list[Any] = []

        if patch.title is not None:
            fields.append("title = ?")
            params.append(patch.title)
        if patch.description is not None:
            fields.append("description = ?")
            params.append(patch.description)
        if patch.status is not None:
            fields.append("status = ?")
            params.append(patch.status.value)
        if patch.priority is not None:
            fields.append("priority = ?")
            params.append(patch.priority.value)
        if patch.due_at is not None:
            fields.append("due_at = ?")
            params.append(float(patch.due_at))
        if patch.assignee_id is not None:
            fields.append("assignee_id = ?")
            params.append(int(patch.assignee_id))
        if patch.tags is not None:
            fields.append("tags = ?")
            params.append(self._tags_to_str(patch.tags))

        # SET expressions see the pre-update row, so patched values are passed in.
        fields.append(
            "is_overdue = CASE WHEN COALESCE(?, status) != 'completed' "
            "AND COALESCE(?, due_at) < ? THEN 1 ELSE 0 END"
        )
        params.extend(
            [
                patch.status.value if patch.status is not None else None,
                float(patch.due_at) if patch.due_at is not None else None,
                float(now_ts),
            ]
        )
        fields.append("updated_at = ?")
        params.append(float(now_ts))

        sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?"
        params.append(int(task_id))
        if expected_assignee_id is not None:
            sql += " AND assignee_id = ?"
            params.append(int(expected_assignee_id))

        with self._db.connect() as conn:
            cur = conn.execute(sql, params)
            updated = cur.rowcount == 1

        logger.debug("Task update id=%s updated=%s", task_id, updated)
        return updated

    def delete_task(self, task_id: int, *, expected_assignee_id: int | None = None) -> bool:
        sql = "DELETE FROM tasks WHERE id = ?"
        params: list[Any] = [int(task_id)]
        if expected_assignee_id is not None:
            sql += " AND assignee_id = ?"
            params.append(int(expected_assignee_id))
        with self._db.connect() as conn:
            cur = conn.execute(sql, params)
            deleted = cur.rowcount == 1
        logger.debug("Task delete id=%s deleted=%s", task_id, deleted)
        return deleted
