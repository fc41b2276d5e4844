# src/teamtask/api/errors.py

"""The one place where internal errors become HTTP responses."""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..errors import TeamTaskError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(TeamTaskError)
    def _handle_app_error(err: TeamTaskError):
        if err.status_code >= 500:
            logger.error("Request failed: %s", err, exc_info=err)
            body = {"success": False, "message": "Server error"}
        else:
            logger.debug("Request rejected status=%s: %s", err.status_code, err.message)
            body = err.to_dict()
        return jsonify(body), err.status_code

    @app.errorhandler(HTTPException)
    def _handle_http_error(err: HTTPException):
        messages = {
            404: "Route not found",
            405: "Method not allowed",
        }
        message = messages.get(err.code or 500, err.description or err.name)
        return jsonify({"success": False, "message": message}), err.code or 500

    @app.errorhandler(Exception)
    def _handle_unexpected(err: Exception):
        logger.exception("Unhandled error")
        return jsonify({"success": False, "message": "Server error"}), 500
