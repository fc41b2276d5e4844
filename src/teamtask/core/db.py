# src/teamtask/core/db.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

from ..errors import StorageError

logger = logging.getLogger(__name__)

# INTEGER columns are signed 64-bit; larger Python ints cannot be bound.
SQLITE_MAX_INT = 2**63 - 1


def is_row_id(value: int) -> bool:
    """True if value can be an INTEGER PRIMARY KEY."""
    return 0 < value <= SQLITE_MAX_INT

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS users (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    email         TEXT NOT NULL UNIQUE COLLATE NOCASE,
    name          TEXT NOT NULL,
    password_hash TEXT NOT NULL,
    role          TEXT NOT NULL DEFAULT 'member',
    is_active     INTEGER NOT NULL DEFAULT 1,
    last_login    REAL,
    bio           TEXT,
    location      TEXT,
    phone         TEXT,
    website       TEXT,
    avatar        TEXT,
    created_at    REAL NOT NULL,
    updated_at    REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS tasks (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    title         TEXT NOT NULL,
    description   TEXT NOT NULL,
    status        TEXT NOT NULL DEFAULT 'todo',
    priority      TEXT NOT NULL DEFAULT 'medium',
    due_at        REAL NOT NULL,
    assignee_id   INTEGER NOT NULL,
    created_by_id INTEGER NOT NULL,
    tags          TEXT NOT NULL DEFAULT '[]',
    is_overdue    INTEGER NOT NULL DEFAULT 0,
    created_at    REAL NOT NULL,
    updated_at    REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS activity_logs (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    action      TEXT NOT NULL,
    entity_type TEXT NOT NULL,
    entity_id   INTEGER NOT NULL,
    user_id     INTEGER NOT NULL,
    changes     TEXT NOT NULL DEFAULT '{}',
    description TEXT NOT NULL,
    ip_address  TEXT,
    user_agent  TEXT,
    created_at  REAL NOT NULL,
    updated_at  REAL NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_users_role ON users(role);
CREATE INDEX IF NOT EXISTS idx_users_created ON users(created_at);

CREATE INDEX IF NOT EXISTS idx_tasks_assignee ON tasks(assignee_id);
CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);
CREATE INDEX IF NOT EXISTS idx_tasks_priority ON tasks(priority);
CREATE INDEX IF NOT EXISTS idx_tasks_due ON tasks(due_at);
CREATE INDEX IF NOT EXISTS idx_tasks_created_by ON tasks(created_by_id);

CREATE INDEX IF NOT EXISTS idx_activity_entity ON activity_logs(entity_type, entity_id, created_at);
CREATE INDEX IF NOT EXISTS idx_activity_user ON activity_logs(user_id, created_at);
CREATE INDEX IF NOT EXISTS idx_activity_action ON activity_logs(action);
"""


class Database:
    """
    SQLite database shared by the stores.

    Thread-safety:
    - every operation opens its own short-lived connection
    - single-record read/modify/write is always one UPDATE statement
    """

    def __init__(self, db_path: str | Path = "teamtask.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self.ensure_schema()
        logger.info("Database ready db=%s", self._db_path)

    @property
    def path(self) -> Path:
        return self._db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        # WAL is unavailable on some filesystems; the default journal still works.
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """
        Yield a connection; commit on success, roll back on error.

        Driver failures surface as StorageError. Other exceptions pass through.
        """
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            logger.exception("Failed to open database %s", self._db_path)
            raise StorageError("Database unavailable") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.exception("Database operation failed")
            raise StorageError() from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
