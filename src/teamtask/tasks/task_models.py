# src/teamtask/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

TITLE_MAX_LEN = 100
DESCRIPTION_MAX_LEN = 1000


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.TODO
        try:
            return cls(raw)
        except ValueError:
            return cls.TODO


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskPriority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM


# Sort rank for priority ordering (low < medium < high < urgent).
PRIORITY_RANK = {
    TaskPriority.LOW: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.HIGH: 2,
    TaskPriority.URGENT: 3,
}


def compute_overdue(due_at: float, status: TaskStatus, now_ts: float) -> bool:
    """Overdue iff the due date has passed and the task is not completed."""
    return status != TaskStatus.COMPLETED and due_at < now_ts


@dataclass(slots=True)
class Task:
    id: int
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    due_at: float

    assignee_id: int
    created_by_id: int

    tags: list[str]
    is_overdue: bool

    created_at: float
    updated_at: float


@dataclass(slots=True)
class TaskFilters:
    search: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None


@dataclass(slots=True)
class TaskPatch:
    """
    Explicit set of fields an update may touch.

    None means "leave unchanged". The creator is not patchable.
    """

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_at: float | None = None
    assignee_id: int | None = None
    tags: list[str] | None = None


@dataclass(slots=True)
class TaskStats:
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0

