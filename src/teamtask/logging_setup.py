# src/teamtask/logging_setup.py

"""Process-wide logging for the API server and the CLI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "teamtask.log"

# Third-party loggers whose INFO lines repeat what the app already logs per request.
_QUIET_LOGGERS = ("werkzeug",)


class _ConsoleNoiseFilter(logging.Filter):
    """teamtask records always pass; captured warnings need ERROR; other libraries WARNING."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name == "teamtask" or name.startswith("teamtask."):
            return True
        if name == "py.warnings":
            return record.levelno >= logging.ERROR
        return record.levelno >= logging.WARNING


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(_ConsoleNoiseFilter())
    return handler


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.FileHandler(str(path), encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/teamtask",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Send every record to stderr (filtered) and to <log_dir>/teamtask.log.

    Handlers already on the root logger are replaced, so a second call does not
    duplicate output. Returns the log file path.
    """
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / LOG_FILE_NAME

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.setLevel(min(console_level, file_level))
    root.addHandler(_console_handler(console_level, formatter))
    root.addHandler(_file_handler(log_file, file_level, formatter))

    logging.captureWarnings(True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file
