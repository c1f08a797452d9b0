"""
Logging for the bank management API.

All module loggers hang off the ``bank_management`` logger, which writes to a
rotating file in LOG_DIR; warnings and above also go to stderr.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from bank_management.core.config import LOG_DIR, LOG_LEVEL, SQL_ECHO

ROOT_LOGGER = "bank_management"

_FORMATTER = logging.Formatter(
    "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    "%Y-%m-%dT%H:%M:%S",
)


def setup_logging(log_dir: str = LOG_DIR, log_level: str = LOG_LEVEL) -> None:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    Path(log_dir).mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        Path(log_dir) / "bank_management.log",
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    stderr_handler = logging.StreamHandler()
    stderr_handler.setLevel(logging.WARNING)

    app_logger = logging.getLogger(ROOT_LOGGER)
    app_logger.setLevel(level)
    # reconfiguring (reload, tests) replaces the previous handlers
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    for handler in (file_handler, stderr_handler):
        handler.setFormatter(_FORMATTER)
        app_logger.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if SQL_ECHO else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
