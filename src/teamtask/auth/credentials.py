# src/teamtask/auth/credentials.py

"""
Password hashing and bearer tokens.

Stateless: a token is valid iff its signature checks out and it has not
expired. There is no server-side session store.
"""

from __future__ import annotations

import logging
import time

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from ..errors import AuthError

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"


class CredentialService:
    def __init__(
        self,
        secret_key: str,
        *,
        token_ttl_seconds: int = 7 * 24 * 3600,
        password_iterations: int = 600_000,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key is required")
        self._secret_key = secret_key
        self._token_ttl = int(token_ttl_seconds)
        self._method = f"pbkdf2:sha256:{int(password_iterations)}"

    # ---- passwords ----

    def hash_password(self, password: str) -> str:
        return generate_password_hash(password, method=self._method)

    def verify_password(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        return check_password_hash(password_hash, password)

    # ---- tokens ----

    def issue_token(self, user_id: int, now_ts: float | None = None) -> str:
        if now_ts is None:
            now_ts = time.time()
        payload = {
            "sub": str(int(user_id)),
            "iat": int(now_ts),
            "exp": int(now_ts) + self._token_ttl,
        }
        return jwt.encode(payload, self._secret_key, algorithm=TOKEN_ALGORITHM)

    def validate_token(self, token: str) -> int:
        """Return the user id carried by token or raise AuthError."""
        if not token:
            raise AuthError("Not authorized, no token")
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[TOKEN_ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired") from None
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected token: %s", e)
            raise AuthError("Not authorized, token failed") from None

        try:
            return int(payload["sub"])
        except (TypeError, ValueError):
            raise AuthError("Not authorized, token failed") from None
