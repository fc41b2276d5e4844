# src/teamtask/auth/account_service.py

"""Self-service account operations: register, login, profile, password."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Mapping
from typing import Any

from ..core.ports import PasswordHasher, TokenIssuer, UserRepo
from ..errors import AuthError, ValidationError
from ..users.user_models import NAME_MAX_LEN, PASSWORD_MIN_LEN, PROFILE_FIELDS, User

logger = logging.getLogger(__name__)

EMAIL_MAX_LEN = 254

# No nested quantifiers: matching stays linear in the input length.
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[a-z]{2,}$")

FieldErrors = list[dict[str, str]]


def _check_name(raw: Any, errors: FieldErrors) -> str | None:
    if not isinstance(raw, str) or not raw.strip():
        errors.append({"field": "name", "message": "Please provide a name"})
        return None
    name = raw.strip()
    if len(name) > NAME_MAX_LEN:
        errors.append(
            {"field": "name", "message": f"Name cannot be more than {NAME_MAX_LEN} characters"}
        )
        return None
    return name


def _check_email(raw: Any, errors: FieldErrors) -> str | None:
    if not isinstance(raw, str) or not raw.strip():
        errors.append({"field": "email", "message": "Please provide an email"})
        return None
    email = raw.strip().lower()
    if len(email) > EMAIL_MAX_LEN or not _EMAIL_RE.match(email):
        errors.append({"field": "email", "message": "Please provide a valid email"})
        return None
    return email


def _check_password(raw: Any, errors: FieldErrors, field: str = "password") -> str | None:
    if not isinstance(raw, str) or not raw:
        errors.append({"field": field, "message": "Please provide a password"})
        return None
    if len(raw) < PASSWORD_MIN_LEN:
        errors.append(
            {
                "field": field,
                "message": f"Password must be at least {PASSWORD_MIN_LEN} characters",
            }
        )
        return None
    return raw


class AccountService:
    def __init__(
        self,
        users: UserRepo,
        credentials: PasswordHasher,
        tokens: TokenIssuer,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._users = users
        self._credentials = credentials
        self._tokens = tokens
        self._clock = clock

    def register(self, payload: Mapping[str, Any]) -> tuple[User, str]:
        errors: FieldErrors = []
        name = _check_name(payload.get("name"), errors)
        email = _check_email(payload.get("email"), errors)
        password = _check_password(payload.get("password"), errors)

        if email is not None and self._users.find_by_email(email) is not None:
            errors.append({"field": "email", "message": "Email already registered"})
        if errors or name is None or email is None or password is None:
            raise ValidationError("Validation error", errors)

        user_id = self._users.add_user(
            email=email,
            name=name,
            password_hash=self._credentials.hash_password(password),
        )
        logger.info("User registered id=%s", user_id)
        user = self._users.get_user(user_id)
        if user is None:
            raise AuthError("Registration failed")
        return user, self._tokens.issue_token(user.id)

    def login(self, email: Any, password: Any) -> tuple[User, str]:
        if not isinstance(email, str) or not email.strip() or not isinstance(password, str):
            raise ValidationError("Please provide an email and password")

        user = self._users.find_by_email(email)
        if user is None or not self._credentials.verify_password(password, user.password_hash):
            raise AuthError("Invalid credentials")
        if not user.is_active:
            raise AuthError("Account has been deactivated")

        now = self._clock()
        self._users.touch_last_login(user.id, now)
        user.last_login = now
        logger.info("User logged in id=%s", user.id)
        return user, self._tokens.issue_token(user.id)

    def resolve_actor(self, token: str | None) -> User:
        """Map a bearer token to an active user, or raise AuthError."""
        user_id = self._tokens.validate_token(token or "")
        user = self._users.get_user(user_id)
        if user is None:
            raise AuthError("User no longer exists")
        if not user.is_active:
            raise AuthError("Account has been deactivated")
        return user

    def update_profile(self, actor: User, payload: Mapping[str, Any]) -> User:
        """Update name, email and profile fields. Role/activation/password keys are ignored."""
        errors: FieldErrors = []
        fields: dict[str, Any] = {}

        if "name" in payload:
            name = _check_name(payload["name"], errors)
            if name is not None:
                fields["name"] = name
        if "email" in payload:
            email = _check_email(payload["email"], errors)
            if email is not None and email != actor.email:
                other = self._users.find_by_email(email)
                if other is not None and other.id != actor.id:
                    errors.append({"field": "email", "message": "Email already registered"})
                else:
                    fields["email"] = email

        for key, max_len in PROFILE_FIELDS.items():
            if key not in payload:
                continue
            value = payload[key]
            if value is None or value == "":
                fields[key] = None
                continue
            if not isinstance(value, str):
                errors.append({"field": key, "message": f"{key} must be a string"})
                continue
            value = value.strip()
            if max_len is not None and len(value) > max_len:
                errors.append(
                    {
                        "field": key,
                        "message": f"{key.capitalize()} cannot be more than {max_len} characters",
                    }
                )
                continue
            fields[key] = value

        if errors:
            raise ValidationError("Validation error", errors)

        if fields and not self._users.update_fields(actor.id, fields):
            raise AuthError("User no longer exists")
        user = self._users.get_user(actor.id)
        if user is None:
            raise AuthError("User no longer exists")
        return user

    def change_password(self, actor: User, current_password: Any, new_password: Any) -> None:
        errors: FieldErrors = []
        if not isinstance(current_password, str) or not current_password:
            errors.append({"field": "currentPassword", "message": "Please provide your current password"})
        new = _check_password(new_password, errors, field="newPassword")
        if errors or new is None or not isinstance(current_password, str):
            raise ValidationError("Validation error", errors)

        if not self._credentials.verify_password(current_password, actor.password_hash):
            raise ValidationError.for_field("currentPassword", "Current password is incorrect")

        self._users.set_password_hash(actor.id, self._credentials.hash_password(new))
        logger.info("Password changed id=%s", actor.id)
