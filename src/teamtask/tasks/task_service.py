# src/teamtask/tasks/task_service.py

"""
Task operations on behalf of an authenticated actor.

Input arrives as decoded JSON (camelCase keys, as the HTTP API sends them).
Validation collects every field problem before failing so callers can show
them all at once.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from ..core.db import is_row_id
from ..core.paging import Page, Pagination
from ..core.policy import Action, authorize, task_scope
from ..core.ports import TaskRepo, UserRepo
from ..errors import NotFound, ValidationError
from ..users.user_models import User
from .task_models import (
    DESCRIPTION_MAX_LEN,
    TITLE_MAX_LEN,
    Task,
    TaskFilters,
    TaskPatch,
    TaskPriority,
    TaskStats,
    TaskStatus,
)

logger = logging.getLogger(__name__)

FieldErrors = list[dict[str, str]]


@dataclass(frozen=True, slots=True)
class TaskView:
    """A task together with the users it references (None if the user is gone)."""

    task: Task
    assignee: User | None
    created_by: User | None


# ---- field parsing ----

# Range that still renders back to a UTC datetime (years 1..9999).
DUE_MIN_TS = datetime(1, 1, 2, tzinfo=timezone.utc).timestamp()
DUE_MAX_TS = datetime(9999, 12, 31, 23, 59, 59, tzinfo=timezone.utc).timestamp()


def parse_due_date(raw: Any) -> float:
    """
    Accept ISO 8601 dates/datetimes (or date/datetime objects) and return a UTC
    timestamp. Naive values are taken as UTC; a bare date means midnight UTC.
    """
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, date):
        dt = datetime(raw.year, raw.month, raw.day)
    elif isinstance(raw, str) and raw.strip():
        text = raw.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError("not a date")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    ts = dt.timestamp()
    if not DUE_MIN_TS <= ts <= DUE_MAX_TS:
        raise ValueError("due date out of range")
    return ts


def _parse_id(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValueError("bool is not an id")
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str) and raw.strip().isdigit():
        value = int(raw.strip())
    else:
        raise ValueError("not an id")
    if not is_row_id(value):
        raise ValueError("id out of range")
    return value


def _parse_tags(raw: Any) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(t, str) for t in raw):
        raise ValueError("tags must be a list of strings")
    out: list[str] = []
    for t in raw:
        t = t.strip()
        if t and t not in out:
            out.append(t)
    return out


def _check_title(raw: Any, errors: FieldErrors) -> str | None:
    if not isinstance(raw, str) or not raw.strip():
        errors.append({"field": "title", "message": "Please provide a task title"})
        return None
    title = raw.strip()
    if len(title) > TITLE_MAX_LEN:
        errors.append(
            {"field": "title", "message": f"Title cannot be more than {TITLE_MAX_LEN} characters"}
        )
        return None
    return title


def _check_description(raw: Any, errors: FieldErrors) -> str | None:
    if not isinstance(raw, str) or not raw.strip():
        errors.append({"field": "description", "message": "Please provide a task description"})
        return None
    if len(raw) > DESCRIPTION_MAX_LEN:
        errors.append(
            {
                "field": "description",
                "message": f"Description cannot be more than {DESCRIPTION_MAX_LEN} characters",
            }
        )
        return None
    return raw


def _check_enum(enum_cls, name: str, raw: Any, errors: FieldErrors):
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        errors.append({"field": name, "message": f"{name} must be one of: {allowed}"})
        return None


def _check_due(raw: Any, errors: FieldErrors) -> float | None:
    if raw is None or raw == "":
        errors.append({"field": "dueDate", "message": "Please provide a due date"})
        return None
    try:
        return parse_due_date(raw)
    except (TypeError, ValueError, OverflowError):
        errors.append({"field": "dueDate", "message": "Invalid due date"})
        return None


def _check_assignee(raw: Any, errors: FieldErrors) -> int | None:
    if raw is None or raw == "":
        errors.append({"field": "assignee", "message": "Please provide an assignee"})
        return None
    try:
        return _parse_id(raw)
    except ValueError:
        errors.append({"field": "assignee", "message": "Invalid assignee id"})
        return None


def _check_tags(raw: Any, errors: FieldErrors) -> list[str] | None:
    try:
        return _parse_tags(raw)
    except ValueError as e:
        errors.append({"field": "tags", "message": str(e)})
        return None


def parse_task_patch(payload: Mapping[str, Any]) -> TaskPatch:
    """
    Build a TaskPatch from a JSON body.

    createdBy (and any other unknown key) is dropped without complaint.
    Explicit nulls for required fields are rejected.
    """
    errors: FieldErrors = []
    patch = TaskPatch()

    if "title" in payload:
        patch.title = _check_title(payload["title"], errors)
    if "description" in payload:
        patch.description = _check_description(payload["description"], errors)
    if "status" in payload:
        patch.status = _check_enum(TaskStatus, "status", payload["status"], errors)
    if "priority" in payload:
        patch.priority = _check_enum(TaskPriority, "priority", payload["priority"], errors)
    if "dueDate" in payload:
        patch.due_at = _check_due(payload["dueDate"], errors)
    if "assignee" in payload:
        patch.assignee_id = _check_assignee(payload["assignee"], errors)
    if "tags" in payload:
        patch.tags = _check_tags(payload["tags"], errors)

    if errors:
        raise ValidationError("Validation error", errors)
    return patch


def parse_filters(
    search: str | None = None,
    status: str | None = None,
    priority: str | None = None,
) -> TaskFilters:
    errors: FieldErrors = []
    filters = TaskFilters(search=(search or "").strip() or None)
    if status:
        filters.status = _check_enum(TaskStatus, "status", status, errors)
    if priority:
        filters.priority = _check_enum(TaskPriority, "priority", priority, errors)
    if errors:
        raise ValidationError("Invalid filter", errors)
    return filters


# ---- service ----


class TaskService:
    def __init__(
        self,
        tasks: TaskRepo,
        users: UserRepo,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._tasks = tasks
        self._users = users
        self._clock = clock

    def _views(self, tasks: list[Task]) -> list[TaskView]:
        ids = {t.assignee_id for t in tasks} | {t.created_by_id for t in tasks}
        people = self._users.get_users(ids)
        return [
            TaskView(task=t, assignee=people.get(t.assignee_id), created_by=people.get(t.created_by_id))
            for t in tasks
        ]

    def _view(self, task: Task) -> TaskView:
        return self._views([task])[0]

    def _require_task(self, task_id: int) -> Task:
        task = self._tasks.get_task(task_id)
        if task is None:
            raise NotFound("Task not found")
        return task

    def _require_assignee(self, assignee_id: int) -> None:
        if self._users.get_user(assignee_id) is None:
            raise ValidationError.for_field("assignee", "Assignee not found")

    def list_tasks(
        self,
        actor: User,
        filters: TaskFilters | None = None,
        pagination: Pagination | None = None,
    ) -> Page:
        authorize(actor, Action.TASK_LIST)
        filters = filters or TaskFilters()
        pagination = pagination or Pagination()
        scope = task_scope(actor)

        total = self._tasks.count_tasks(assignee_id=scope, filters=filters)
        tasks = self._tasks.list_tasks(
            assignee_id=scope,
            filters=filters,
            sort=pagination.sort,
            limit=pagination.limit,
            offset=pagination.offset,
        )
        return Page(
            items=self._views(tasks),
            total_count=total,
            page=pagination.page,
            limit=pagination.limit,
        )

    def create_task(self, actor: User, payload: Mapping[str, Any]) -> TaskView:
        authorize(actor, Action.TASK_CREATE)
        errors: FieldErrors = []

        title = _check_title(payload.get("title"), errors)
        description = _check_description(payload.get("description"), errors)
        due_at = _check_due(payload.get("dueDate"), errors)
        assignee_id = _check_assignee(payload.get("assignee"), errors)

        status = TaskStatus.TODO
        if payload.get("status") is not None:
            status = _check_enum(TaskStatus, "status", payload["status"], errors) or status
        priority = TaskPriority.MEDIUM
        if payload.get("priority") is not None:
            priority = _check_enum(TaskPriority, "priority", payload["priority"], errors) or priority
        tags: list[str] = []
        if payload.get("tags") is not None:
            tags = _check_tags(payload["tags"], errors) or []

        if assignee_id is not None and self._users.get_user(assignee_id) is None:
            errors.append({"field": "assignee", "message": "Assignee not found"})

        if (
            errors
            or title is None
            or description is None
            or due_at is None
            or assignee_id is None
        ):
            raise ValidationError("Please provide all required fields", errors)

        task_id = self._tasks.add_task(
            title=title,
            description=description,
            due_at=due_at,
            assignee_id=assignee_id,
            created_by_id=actor.id,
            status=status,
            priority=priority,
            tags=tags,
            now_ts=self._clock(),
        )
        logger.info("Task created id=%s by=%s assignee=%s", task_id, actor.id, assignee_id)
        return self._view(self._require_task(task_id))

    def get_task(self, actor: User, task_id: int) -> TaskView:
        task = self._require_task(task_id)
        authorize(actor, Action.TASK_READ, task)
        return self._view(task)

    def update_task(self, actor: User, task_id: int, patch: TaskPatch) -> TaskView:
        task = self._require_task(task_id)
        authorize(actor, Action.TASK_UPDATE, task)

        if patch.assignee_id is not None:
            self._require_assignee(patch.assignee_id)

        updated = self._tasks.update_task(
            task_id,
            patch,
            expected_assignee_id=task.assignee_id,
            now_ts=self._clock(),
        )
        if not updated:
            # Deleted or reassigned between the check and the write: judge again.
            current = self._require_task(task_id)
            authorize(actor, Action.TASK_UPDATE, current)
            updated = self._tasks.update_task(
                task_id,
                patch,
                expected_assignee_id=current.assignee_id,
                now_ts=self._clock(),
            )
            if not updated:
                raise NotFound("Task not found")

        logger.info("Task updated id=%s by=%s", task_id, actor.id)
        return self._view(self._require_task(task_id))

    def delete_task(self, actor: User, task_id: int) -> None:
        task = self._require_task(task_id)
        authorize(actor, Action.TASK_DELETE, task)
        if not self._tasks.delete_task(task_id, expected_assignee_id=task.assignee_id):
            current = self._require_task(task_id)
            authorize(actor, Action.TASK_DELETE, current)
            if not self._tasks.delete_task(task_id, expected_assignee_id=current.assignee_id):
                raise NotFound("Task not found")
        logger.info("Task deleted id=%s by=%s", task_id, actor.id)

    def overview(self, actor: User) -> TaskStats:
        authorize(actor, Action.TASK_LIST)
        return self._tasks.stats(assignee_id=task_scope(actor))
