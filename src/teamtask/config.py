# src/teamtask/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

One Settings object for the whole app. Nothing here requires secrets at
import time; the signing key is checked when the server is built.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

ENV_PREFIX = "TEAMTASK"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    debug: bool

    # ---- HTTP ----
    host: str
    port: int
    cors_origins: List[str]

    # ---- Credentials ----
    secret_key: Optional[str]
    token_ttl_seconds: int
    password_iterations: int

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "teamtask") or "teamtask"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        debug = _env_bool(_k("DEBUG"), False)

        host = _env(_k("HOST"), "127.0.0.1")
        port = _env_int(_k("PORT"), 5000)
        cors_origins = _env_list(_k("CORS_ORIGINS"), ["http://localhost:3000"])

        secret_key = _env(_k("SECRET_KEY"), "").strip() or None
        token_ttl_seconds = _env_int(_k("TOKEN_TTL_SECONDS"), 7 * 24 * 3600)
        password_iterations = _env_int(_k("PASSWORD_ITERATIONS"), 600_000)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/teamtask"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "teamtask.sqlite3")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            debug=debug,
            host=host,
            port=port,
            cors_origins=cors_origins,
            secret_key=secret_key,
            token_ttl_seconds=token_ttl_seconds,
            password_iterations=password_iterations,
            data_dir=data_dir,
            db_path=db_path,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
