# src/teamtask/cli/bootstrap.py

"""
Composition root.

- loads settings once,
- ensures local (gitignored) directories exist,
- wires the SQLite stores, credentials and services into AppState.
"""

from __future__ import annotations

import logging
import secrets

from ..activity.activity_store import ActivityStore
from ..auth.account_service import AccountService
from ..auth.credentials import CredentialService
from ..config import get_settings
from ..core.db import Database
from ..core.state import AppState
from ..errors import ValidationError
from ..tasks.task_service import TaskService
from ..tasks.task_store import TaskStore
from ..users.user_models import Role
from ..users.user_service import UserService
from ..users.user_store import UserStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def _secret_key(settings) -> str:
    key = getattr(settings, "secret_key", None)
    if key:
        return key
    logger.warning(
        "TEAMTASK_SECRET_KEY is not set; using a random key. Tokens will not survive a restart."
    )
    return secrets.token_urlsafe(48)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Settings are injectable so tests can pass their own; falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    db = Database(settings.db_path)
    users = UserStore(db)
    tasks = TaskStore(db)
    credentials = CredentialService(
        _secret_key(settings),
        token_ttl_seconds=settings.token_ttl_seconds,
        password_iterations=settings.password_iterations,
    )

    return AppState(
        settings=settings,
        db=db,
        users=users,
        tasks=tasks,
        activity=ActivityStore(db),
        credentials=credentials,
        accounts=AccountService(users, credentials, credentials),
        task_service=TaskService(tasks, users),
        user_service=UserService(users),
    )


def create_admin(state: AppState, *, name: str, email: str, password: str) -> int:
    """
    Register an account and promote it to admin (or promote an existing one).

    Used to bootstrap the first administrator, since the API only creates members.
    """
    existing = state.users.find_by_email(email)
    if existing is not None:
        state.users.set_role(existing.id, Role.ADMIN)
        state.users.set_active(existing.id, True)
        logger.info("Promoted existing user id=%s to admin", existing.id)
        return existing.id

    user, _token = state.accounts.register({"name": name, "email": email, "password": password})
    if not state.users.set_role(user.id, Role.ADMIN):
        raise ValidationError("Failed to promote new user")
    logger.info("Created admin id=%s", user.id)
    return user.id
