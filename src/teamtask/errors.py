# src/teamtask/errors.py

"""
Error taxonomy shared by stores, services and the API layer.

Services raise these; only the API layer turns them into HTTP responses.
"""

from __future__ import annotations

from typing import Any


class TeamTaskError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationError(TeamTaskError):
    """Malformed or missing input. Carries one entry per offending field."""

    status_code = 400
    default_message = "Validation error"

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.errors: list[dict[str, str]] = list(errors or [])

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationError:
        return cls(message, [{"field": field, "message": message}])

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.errors:
            out["errors"] = self.errors
        return out


class AuthError(TeamTaskError):
    status_code = 401
    default_message = "Not authorized to access this route"


class Forbidden(TeamTaskError):
    status_code = 403
    default_message = "Access denied"


class NotFound(TeamTaskError):
    status_code = 404
    default_message = "Resource not found"


class InvalidOperation(TeamTaskError):
    """Well-formed request that breaks a business rule (e.g. changing your own role)."""

    status_code = 400
    default_message = "Invalid operation"


class StorageError(TeamTaskError):
    status_code = 500
    default_message = "Storage error"
