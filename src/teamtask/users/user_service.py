# src/teamtask/users/user_service.py

from __future__ import annotations

import logging
from typing import Any

from ..core.paging import Page, Pagination
from ..core.policy import Action, authorize
from ..core.ports import UserRepo
from ..errors import NotFound, ValidationError
from .user_models import Role, User

logger = logging.getLogger(__name__)


def parse_role(raw: Any) -> Role:
    try:
        return Role(raw)
    except ValueError:
        raise ValidationError.for_field("role", "Invalid role. Must be admin or member.") from None


class UserService:
    """Admin surface over user accounts."""

    def __init__(self, users: UserRepo) -> None:
        self._users = users

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_user(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def list_users(self, actor: User, pagination: Pagination | None = None) -> Page:
        authorize(actor, Action.USER_LIST)
        pagination = pagination or Pagination()
        total = self._users.count_users()
        items = self._users.list_users(limit=pagination.limit, offset=pagination.offset)
        return Page(items=items, total_count=total, page=pagination.page, limit=pagination.limit)

    def get_user(self, actor: User, user_id: int) -> User:
        authorize(actor, Action.USER_READ)
        return self._require_user(user_id)

    def update_user_role(self, actor: User, user_id: int, new_role: Any) -> User:
        authorize(actor, Action.USER_UPDATE_ROLE, user_id)
        role = parse_role(new_role)
        self._require_user(user_id)

        if not self._users.set_role(user_id, role):
            raise NotFound("User not found")
        logger.info("User role changed id=%s role=%s by=%s", user_id, role.value, actor.id)
        return self._require_user(user_id)

    def set_user_active(self, actor: User, user_id: int, active: bool) -> User:
        action = Action.USER_ACTIVATE if active else Action.USER_DEACTIVATE
        authorize(actor, action, user_id)
        self._require_user(user_id)

        if not self._users.set_active(user_id, active):
            raise NotFound("User not found")
        logger.info(
            "User %s id=%s by=%s", "activated" if active else "deactivated", user_id, actor.id
        )
        return self._require_user(user_id)
