# src/teamtask/api/app.py

"""Flask application factory."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from flask import Flask, g, jsonify, request

from ..core.state import AppState
from . import auth_routes, stats_routes, task_routes, user_routes
from .errors import register_error_handlers
from .security import STATE_KEY

logger = logging.getLogger(__name__)

_CORS_METHODS = "GET, POST, PUT, DELETE, PATCH, OPTIONS"
_CORS_HEADERS = "Content-Type, Authorization, X-Requested-With"


def create_app(state: AppState) -> Flask:
    app = Flask("teamtask")
    app.extensions[STATE_KEY] = state
    app.json.sort_keys = False

    settings = state.settings
    cors_origins = set(getattr(settings, "cors_origins", []) or [])

    for module in (auth_routes, task_routes, user_routes, stats_routes):
        app.register_blueprint(module.bp)

    @app.get("/api/health")
    def health():
        return jsonify(
            {
                "status": "OK",
                "message": "Task Manager API is running",
                "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            }
        )

    @app.before_request
    def _start_timer() -> None:
        g.started = time.perf_counter()

    @app.after_request
    def _finish(response):
        origin = request.headers.get("Origin")
        if origin and origin in cors_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Methods"] = _CORS_METHODS
            response.headers["Access-Control-Allow-Headers"] = _CORS_HEADERS
            response.headers["Vary"] = "Origin"

        started = g.get("started")
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.debug(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    register_error_handlers(app)
    return app
