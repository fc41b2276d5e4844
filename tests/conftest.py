# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from teamtask.api.app import create_app
from teamtask.cli.bootstrap import create_initial_state
from teamtask.core.state import AppState
from teamtask.users.user_models import Role

from .fakes import FixedClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap and the app factory.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="teamtask-test",
        log_level="DEBUG",
        debug=False,
        host="127.0.0.1",
        port=0,
        cors_origins=["http://localhost:3000"],
        secret_key="test-secret-key-with-enough-length-for-hs256",
        token_ttl_seconds=3600,
        # Low iteration count keeps password hashing fast in tests.
        password_iterations=1000,
        data_dir=tmp_path,
        db_path=tmp_path / "teamtask.sqlite3",
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired the same way as production.

    NOTE: We keep the real SQLite stores here because their queries carry the
    access-scoping rules we want to test.
    """
    return create_initial_state(settings=settings)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def app(state: AppState):
    app = create_app(state)
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


def _register(state: AppState, name: str, email: str, role: Role = Role.MEMBER):
    user, token = state.accounts.register(
        {"name": name, "email": email, "password": "password123"}
    )
    if role != Role.MEMBER:
        state.users.set_role(user.id, role)
        user = state.users.get_user(user.id)
    return SimpleNamespace(user=user, token=token, headers={"Authorization": f"Bearer {token}"})


@pytest.fixture()
def admin(state: AppState) -> SimpleNamespace:
    return _register(state, "Admin User", "admin@example.com", Role.ADMIN)


@pytest.fixture()
def member_x(state: AppState) -> SimpleNamespace:
    return _register(state, "Member X", "memberx@example.com")


@pytest.fixture()
def member_y(state: AppState) -> SimpleNamespace:
    return _register(state, "Member Y", "membery@example.com")
