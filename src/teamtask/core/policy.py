# src/teamtask/core/policy.py

"""
Authorization policy.

Pure functions, no I/O: given an actor, an action and (optionally) the target
record, either return None (allowed) or raise Forbidden / InvalidOperation.
Every service goes through authorize(); routes never check roles themselves.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from ..errors import Forbidden, InvalidOperation
from ..tasks.task_models import Task
from ..users.user_models import User


class Action(StrEnum):
    TASK_LIST = "task:list"
    TASK_CREATE = "task:create"
    TASK_READ = "task:read"
    TASK_UPDATE = "task:update"
    TASK_DELETE = "task:delete"

    USER_LIST = "user:list"
    USER_READ = "user:read"
    USER_UPDATE_ROLE = "user:update-role"
    USER_DEACTIVATE = "user:deactivate"
    USER_ACTIVATE = "user:activate"


_TASK_RECORD_ACTIONS = {Action.TASK_READ, Action.TASK_UPDATE, Action.TASK_DELETE}

_ADMIN_ONLY_ACTIONS = {
    Action.USER_LIST,
    Action.USER_READ,
    Action.USER_UPDATE_ROLE,
    Action.USER_DEACTIVATE,
    Action.USER_ACTIVATE,
}

_TASK_DENIED = {
    Action.TASK_READ: "Not authorized to access this task",
    Action.TASK_UPDATE: "Not authorized to update this task",
    Action.TASK_DELETE: "Not authorized to delete this task",
}

_SELF_DENIED = {
    Action.USER_UPDATE_ROLE: "Cannot change your own role",
    Action.USER_DEACTIVATE: "Cannot deactivate your own account",
}


def task_scope(actor: User) -> int | None:
    """Assignee filter for listing: None for admins (everything), own id for members."""
    return None if actor.is_admin else actor.id


def authorize(actor: User, action: Action, target: Any = None) -> None:
    """
    Decide whether actor may perform action on target.

    target is a Task for task record actions and a user id (int) for the
    user actions that protect against self-targeting.
    """
    if action in (Action.TASK_LIST, Action.TASK_CREATE):
        return

    if action in _TASK_RECORD_ACTIONS:
        if not isinstance(target, Task):
            raise TypeError(f"{action} needs a Task target")
        if actor.is_admin or target.assignee_id == actor.id:
            return
        raise Forbidden(_TASK_DENIED[action])

    if action in _ADMIN_ONLY_ACTIONS:
        if not actor.is_admin:
            raise Forbidden("Access denied. Admin only.")
        if action in _SELF_DENIED and target is not None and int(target) == actor.id:
            raise InvalidOperation(_SELF_DENIED[action])
        return

    raise ValueError(f"Unknown action: {action!r}")
