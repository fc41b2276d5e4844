# src/teamtask/api/security.py

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

from flask import current_app, g, request

from ..core.state import AppState
from ..errors import AuthError, ValidationError
from ..users.user_models import User

STATE_KEY = "teamtask"


def get_state() -> AppState:
    return current_app.extensions[STATE_KEY]


def bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def login_required(view: Callable[..., Any]) -> Callable[..., Any]:
    """Resolve the bearer token to an active user and expose it as g.actor."""

    @functools.wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        token = bearer_token()
        if token is None:
            raise AuthError("Not authorized, no token")
        g.actor = get_state().accounts.resolve_actor(token)
        return view(*args, **kwargs)

    return wrapper


def current_actor() -> User:
    actor = g.get("actor")
    if actor is None:
        raise AuthError()
    return actor


def json_body() -> dict[str, Any]:
    """Decoded JSON object body; empty dict when there is no body."""
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data(cache=True):
            raise ValidationError("Malformed JSON body")
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
