# src/teamtask/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs one of:
- serve: the HTTP API (threaded Flask server),
- init-db: create the database schema and exit,
- create-admin: bootstrap an administrator account.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import Optional

from ..api.app import create_app
from ..cli.bootstrap import create_admin, create_initial_state
from ..config import get_settings
from ..errors import TeamTaskError
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def cmd_serve(ns: argparse.Namespace, state) -> int:
    settings = state.settings
    host = ns.host or settings.host
    port = int(ns.port or settings.port)
    app = create_app(state)
    logger.info("Serving %s on http://%s:%s", settings.app_name, host, port)
    app.run(host=host, port=port, debug=settings.debug, threaded=True, use_reloader=False)
    return 0


def cmd_init_db(ns: argparse.Namespace, state) -> int:
    print(f"Initialized database at: {state.db.path}")
    return 0


def cmd_create_admin(ns: argparse.Namespace, state) -> int:
    password = ns.password or getpass.getpass("Password: ")
    try:
        user_id = create_admin(state, name=ns.name, email=ns.email, password=password)
    except TeamTaskError as e:
        details = "; ".join(f"{x['field']}: {x['message']}" for x in getattr(e, "errors", []))
        print(f"Failed: {e.message}" + (f" ({details})" if details else ""), file=sys.stderr)
        return 1
    print(f"Admin ready: #{user_id} {ns.email}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="teamtask",
        description="Team task tracker API server.",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("serve", help="Run the HTTP API.")
    s.add_argument("--host", help="Bind address (default: TEAMTASK_HOST or 127.0.0.1).")
    s.add_argument("--port", type=int, help="Port (default: TEAMTASK_PORT or 5000).")
    s.set_defaults(func=cmd_serve)

    s = sub.add_parser("init-db", help="Create the database schema.")
    s.set_defaults(func=cmd_init_db)

    s = sub.add_parser("create-admin", help="Create or promote an administrator.")
    s.add_argument("email", help="Admin email.")
    s.add_argument("--name", default="Administrator", help="Display name for a new account.")
    s.add_argument("--password", help="Password (prompted when omitted).")
    s.set_defaults(func=cmd_create_admin)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)

    settings = get_settings()
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    state = create_initial_state(settings=settings)
    return int(ns.func(ns, state))


if __name__ == "__main__":
    sys.exit(main())
