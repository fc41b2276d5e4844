# tests/test_cli.py

from __future__ import annotations

import logging

import pytest

from teamtask.cli import main as cli_main
from teamtask.cli.bootstrap import create_admin
from teamtask.logging_setup import _ConsoleNoiseFilter, setup_logging
from teamtask.users.user_models import Role


def test_create_admin_registers_new_account(state) -> None:
    user_id = create_admin(state, name="Root", email="root@example.com", password="password123")

    user = state.users.get_user(user_id)
    assert user.role == Role.ADMIN
    assert state.accounts.login("root@example.com", "password123")[0].id == user_id


def test_create_admin_promotes_and_reactivates_existing(state, member_x) -> None:
    state.users.set_active(member_x.user.id, False)

    user_id = create_admin(state, name="ignored", email="MemberX@example.com", password="ignored")

    assert user_id == member_x.user.id
    user = state.users.get_user(user_id)
    assert user.role == Role.ADMIN
    assert user.is_active is True


def test_parser_requires_a_command() -> None:
    parser = cli_main.build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args([])

    ns = parser.parse_args(["create-admin", "a@example.com", "--password", "secret1"])
    assert ns.func is cli_main.cmd_create_admin
    assert ns.name == "Administrator"


def test_main_create_admin_and_init_db(monkeypatch, settings, capsys) -> None:
    monkeypatch.setattr(cli_main, "get_settings", lambda: settings)
    monkeypatch.setattr(cli_main, "setup_logging", lambda **_kw: None)

    assert cli_main.main(["init-db"]) == 0
    assert str(settings.db_path) in capsys.readouterr().out

    assert cli_main.main(["create-admin", "boss@example.com", "--password", "password123"]) == 0
    assert "boss@example.com" in capsys.readouterr().out

    assert cli_main.main(["create-admin", "not-an-email", "--password", "password123"]) == 1
    assert "email" in capsys.readouterr().err


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_noise_filter() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("teamtask.api.app", logging.DEBUG))
    assert not f.filter(_record("werkzeug", logging.INFO))
    assert f.filter(_record("werkzeug", logging.WARNING))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert f.filter(_record("py.warnings", logging.ERROR))


def test_setup_logging_replaces_handlers_and_writes_file(tmp_path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path, console_level=logging.WARNING)

        assert log_file == tmp_path / "teamtask.log"
        assert len(root.handlers) == 2
        assert logging.getLogger("werkzeug").level == logging.WARNING

        logging.getLogger("teamtask.tests").debug("written to the file only")
        for h in root.handlers:
            h.flush()
        assert "written to the file only" in log_file.read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
