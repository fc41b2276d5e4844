# src/teamtask/users/user_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

NAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 6

# Optional profile fields and their max lengths (None = unbounded).
PROFILE_FIELDS: dict[str, int | None] = {
    "bio": 500,
    "location": 100,
    "phone": 20,
    "website": 200,
    "avatar": None,
}


class Role(StrEnum):
    MEMBER = "member"
    ADMIN = "admin"

    @classmethod
    def from_db(cls, raw: str | None) -> Role:
        if not raw:
            return cls.MEMBER
        try:
            return cls(raw)
        except ValueError:
            return cls.MEMBER


@dataclass(slots=True)
class User:
    id: int
    email: str
    name: str
    password_hash: str
    role: Role
    is_active: bool

    created_at: float
    updated_at: float
    last_login: float | None = None

    bio: str | None = None
    location: str | None = None
    phone: str | None = None
    website: str | None = None
    avatar: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
