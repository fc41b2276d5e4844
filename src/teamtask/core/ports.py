# src/teamtask/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the services.

Services depend on Protocols instead of the SQLite stores so tests can swap
in fakes and the storage backend stays replaceable.
"""

from typing import Any, Protocol

from ..tasks.task_models import Task, TaskFilters, TaskPatch, TaskStats
from ..users.user_models import Role, User


class UserRepo(Protocol):
    def get_user(self, user_id: int) -> User | None: ...
    def get_users(self, user_ids: set[int]) -> dict[int, User]: ...
    def find_by_email(self, email: str) -> User | None: ...
    def count_users(self) -> int: ...
    def list_users(self, *, limit: int, offset: int) -> list[User]: ...

    def add_user(
            self,
            *,
            email: str,
            name: str,
            password_hash: str,
            role: Role = ...,
            is_active: bool = True,
    ) -> int: ...

    def update_fields(self, user_id: int, fields: dict[str, Any]) -> bool: ...
    def set_role(self, user_id: int, role: Role) -> bool: ...
    def set_active(self, user_id: int, active: bool) -> bool: ...
    def set_password_hash(self, user_id: int, password_hash: str) -> bool: ...
    def touch_last_login(self, user_id: int, now_ts: float | None = None) -> None: ...


class TaskRepo(Protocol):
    def get_task(self, task_id: int) -> Task | None: ...

    def count_tasks(
            self,
            *,
            assignee_id: int | None = None,
            filters: TaskFilters | None = None,
    ) -> int: ...

    def list_tasks(
            self,
            *,
            assignee_id: int | None = None,
            filters: TaskFilters | None = None,
            sort: str = "-createdAt",
            limit: int = 10,
            offset: int = 0,
    ) -> list[Task]: ...

    def stats(self, *, assignee_id: int | None = None) -> TaskStats: ...

    def add_task(
            self,
            *,
            title: str,
            description: str,
            due_at: float,
            assignee_id: int,
            created_by_id: int,
            status: Any = ...,
            priority: Any = ...,
            tags: list[str] | None = None,
            now_ts: float | None = None,
    ) -> int: ...

    def update_task(
            self,
            task_id: int,
            patch: TaskPatch,
            *,
            expected_assignee_id: int | None = None,
            now_ts: float | None = None,
    ) -> bool: ...

    def delete_task(self, task_id: int, *, expected_assignee_id: int | None = None) -> bool: ...


class PasswordHasher(Protocol):
    def hash_password(self, password: str) -> str: ...
    def verify_password(self, password: str, password_hash: str) -> bool: ...


class TokenIssuer(Protocol):
    def issue_token(self, user_id: int) -> str: ...
    def validate_token(self, token: str) -> int: ...
