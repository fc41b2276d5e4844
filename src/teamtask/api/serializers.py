# src/teamtask/api/serializers.py

"""JSON shapes returned by the API (camelCase, never a password hash)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..core.paging import Page
from ..tasks.task_models import TaskStats
from ..tasks.task_service import TaskView
from ..users.user_models import User


def iso(ts: float | None) -> str | None:
    if ts is None:
        return None
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def user_ref(user: User | None, user_id: int) -> dict[str, Any] | int:
    """Public fields of a referenced user; the bare id if the user is gone."""
    if user is None:
        return user_id
    return {"id": user.id, "name": user.name, "email": user.email}


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "isActive": user.is_active,
        "bio": user.bio,
        "location": user.location,
        "phone": user.phone,
        "website": user.website,
        "avatar": user.avatar,
        "lastLogin": iso(user.last_login),
        "createdAt": iso(user.created_at),
        "updatedAt": iso(user.updated_at),
    }


def task_to_dict(view: TaskView) -> dict[str, Any]:
    t = view.task
    return {
        "id": t.id,
        "title": t.title,
        "description": t.description,
        "status": t.status.value,
        "priority": t.priority.value,
        "dueDate": iso(t.due_at),
        "assignee": user_ref(view.assignee, t.assignee_id),
        "createdBy": user_ref(view.created_by, t.created_by_id),
        "tags": list(t.tags),
        "isOverdue": t.is_overdue,
        "createdAt": iso(t.created_at),
        "updatedAt": iso(t.updated_at),
    }


def pagination_to_dict(page: Page) -> dict[str, Any]:
    out: dict[str, Any] = {"total": page.total_count}
    if page.has_next:
        out["next"] = {"page": page.page + 1, "limit": page.limit}
    if page.has_prev:
        out["prev"] = {"page": page.page - 1, "limit": page.limit}
    return out


def stats_to_dict(stats: TaskStats) -> dict[str, int]:
    return {
        "totalTasks": stats.total,
        "completedTasks": stats.completed,
        "pendingTasks": stats.pending,
        "overdueTasks": stats.overdue,
    }
