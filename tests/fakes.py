# tests/fakes.py

from __future__ import annotations

import time

from teamtask.tasks.task_models import Task, TaskPriority, TaskStatus
from teamtask.users.user_models import Role, User

DAY = 24 * 3600


class FixedClock:
    """
    Deterministic clock for services.

    - Starts at a fixed "now" (real time at construction, so ISO dates in
      tests stay realistic)
    - Only moves when advance() is called
    """

    def __init__(self, now: float | None = None) -> None:
        self.now = time.time() if now is None else now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_user(user_id: int, role: Role = Role.MEMBER, **overrides) -> User:
    fields = dict(
        id=user_id,
        email=f"user{user_id}@example.com",
        name=f"User {user_id}",
        password_hash="x",
        role=role,
        is_active=True,
        created_at=0.0,
        updated_at=0.0,
    )
    fields.update(overrides)
    return User(**fields)


def make_task(task_id: int, assignee_id: int, created_by_id: int = 1, **overrides) -> Task:
    fields = dict(
        id=task_id,
        title=f"Task {task_id}",
        description="desc",
        status=TaskStatus.TODO,
        priority=TaskPriority.MEDIUM,
        due_at=time.time() + DAY,
        assignee_id=assignee_id,
        created_by_id=created_by_id,
        tags=[],
        is_overdue=False,
        created_at=0.0,
        updated_at=0.0,
    )
    fields.update(overrides)
    return Task(**fields)
