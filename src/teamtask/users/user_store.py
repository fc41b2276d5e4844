# src/teamtask/users/user_store.py

from __future__ import annotations

import logging
import sqlite3
import time
from typing import Any

from ..core.db import Database, is_row_id
from ..errors import StorageError, ValidationError
from .user_models import PROFILE_FIELDS, Role, User

logger = logging.getLogger(__name__)

# Columns an update may write; everything else is managed by dedicated methods.
_UPDATABLE = {"name", "email", *PROFILE_FIELDS}


class UserStore:
    """SQLite user store. Emails are stored lowercased and compared NOCASE."""

    def __init__(self, db: Database) -> None:
        self._db = db

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            id=int(row["id"]),
            email=str(row["email"]),
            name=str(row["name"]),
            password_hash=str(row["password_hash"]),
            role=Role.from_db(row["role"]),
            is_active=bool(row["is_active"]),
            created_at=float(row["created_at"]),
            updated_at=float(row["updated_at"]),
            last_login=float(row["last_login"]) if row["last_login"] is not None else None,
            bio=row["bio"],
            location=row["location"],
            phone=row["phone"],
            website=row["website"],
            avatar=row["avatar"],
        )

    # ---- reads ----

    def count_users(self) -> int:
        with self._db.connect() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM users").fetchone()
            return int(n)

    def get_user(self, user_id: int) -> User | None:
        if not is_row_id(int(user_id)):
            return None
        with self._db.connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (int(user_id),)).fetchone()
            return self._row_to_user(row) if row else None

    def get_users(self, user_ids: set[int]) -> dict[int, User]:
        """Bulk lookup used when expanding task references."""
        ids = sorted({int(i) for i in user_ids if is_row_id(int(i))})
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        with self._db.connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM users WHERE id IN ({placeholders})", ids
            ).fetchall()
            return {int(r["id"]): self._row_to_user(r) for r in rows}

    def find_by_email(self, email: str) -> User | None:
        with self._db.connect() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ?", (email.strip().lower(),)
            ).fetchone()
            return self._row_to_user(row) if row else None

    def list_users(self, *, limit: int, offset: int) -> list[User]:
        with self._db.connect() as conn:
            rows = conn.execute(
                """
                SELECT *
                FROM users
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (int(limit), int(offset)),
            ).fetchall()
            return [self._row_to_user(r) for r in rows]

    # ---- writes ----

    def add_user(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        role: Role = Role.MEMBER,
        is_active: bool = True,
    ) -> int:
        now = time.time()
        with self._db.connect() as conn:
            try:
                cur = conn.execute(
                    """
                    INSERT INTO users(email, name, password_hash, role, is_active, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        email.strip().lower(),
                        name.strip(),
                        password_hash,
                        role.value,
                        1 if is_active else 0,
                        now,
                        now,
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise ValidationError.for_field("email", "Email already registered") from e
            rowid = cur.lastrowid
            if rowid is None:
                raise StorageError("SQLite did not return lastrowid for users insert")
            user_id = int(rowid)
        logger.debug("User added id=%s role=%s", user_id, role.value)
        return user_id

    def update_fields(self, user_id: int, fields: dict[str, Any]) -> bool:
        """Update name/email/profile columns. Returns False if the row is gone."""
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"not updatable: {sorted(unknown)}")
        if not fields:
            return self.get_user(user_id) is not None

        cols: list[str] = []
        params: list[Any] = []
        for name, value in fields.items():
            if name == "email" and value is not None:
                value = str(value).strip().lower()
            cols.append(f"{name} = ?")
            params.append(value)
        cols.append("updated_at = ?")
        params.append(time.time())
        params.append(int(user_id))

        with self._db.connect() as conn:
            try:
                cur = conn.execute(f"UPDATE users SET {', '.join(cols)} WHERE id = ?", params)
            except sqlite3.IntegrityError as e:
                raise ValidationError.for_field("email", "Email already registered") from e
            return cur.rowcount == 1

    def set_role(self, user_id: int, role: Role) -> bool:
        with self._db.connect() as conn:
            cur = conn.execute(
                "UPDATE users SET role = ?, updated_at = ? WHERE id = ?",
                (role.value, time.time(), int(user_id)),
            )
            return cur.rowcount == 1

    def set_active(self, user_id: int, active: bool) -> bool:
        with self._db.connect() as conn:
            cur = conn.execute(
                "UPDATE users SET is_active = ?, updated_at = ? WHERE id = ?",
                (1 if active else 0, time.time(), int(user_id)),
            )
            return cur.rowcount == 1

    def set_password_hash(self, user_id: int, password_hash: str) -> bool:
        with self._db.connect() as conn:
            cur = conn.execute(
                "UPDATE users SET password_hash = ?, updated_at = ? WHERE id = ?",
                (password_hash, time.time(), int(user_id)),
            )
            return cur.rowcount == 1

    def touch_last_login(self, user_id: int, now_ts: float | None = None) -> None:
        if now_ts is None:
            now_ts = time.time()
        with self._db.connect() as conn:
            conn.execute(
                "UPDATE users SET last_login = ? WHERE id = ?",
                (float(now_ts), int(user_id)),
            )
