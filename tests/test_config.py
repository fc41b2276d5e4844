# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from teamtask.config import Settings


def test_defaults(monkeypatch) -> None:
    for name in (
        "TEAMTASK_PORT",
        "TEAMTASK_SECRET_KEY",
        "TEAMTASK_CORS_ORIGINS",
        "TEAMTASK_DATA_DIR",
        "TEAMTASK_DB_PATH",
        "TEAMTASK_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)

    s = Settings.from_env()
    assert s.port == 5000
    assert s.secret_key is None
    assert s.cors_origins == ["http://localhost:3000"]
    assert s.db_path == Path(".local/teamtask") / "teamtask.sqlite3"
    assert s.debug is False


def test_env_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("TEAMTASK_PORT", "8080")
    monkeypatch.setenv("TEAMTASK_SECRET_KEY", " s3cret ")
    monkeypatch.setenv("TEAMTASK_CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("TEAMTASK_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("TEAMTASK_DB_PATH", raising=False)
    monkeypatch.setenv("TEAMTASK_DEBUG", "yes")

    s = Settings.from_env()
    assert s.port == 8080
    assert s.secret_key == "s3cret"
    assert s.cors_origins == ["http://a.test", "http://b.test"]
    assert s.db_path == tmp_path / "teamtask.sqlite3"
    assert s.debug is True


def test_bad_int_falls_back(monkeypatch) -> None:
    monkeypatch.setenv("TEAMTASK_PORT", "eighty")
    assert Settings.from_env().port == 5000
