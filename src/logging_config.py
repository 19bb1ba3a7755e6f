"""
Centralized logging configuration for the generators.

Every module logs through `logging.getLogger(__name__)`. Call `setup_logging()` once at startup to route those records
to the console and, optionally, to a rotating log file.

Usage:
    from logging_config import setup_logging
    setup_logging(logging.INFO, log_file="worldgen.log")
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

import constants

# Loggers of the project live under these top-level names (flat src layout, "__main__" when run as a script).
PROJECT_LOGGERS: tuple[str, ...] = ("model", "main_app", "__main__")

_handlers: list[logging.Handler] = []


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Path | str | None = None,
    file_level: int = logging.DEBUG,
) -> Path | None:
    """
    Configure console and file logging for all project loggers.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        console_level: Level for console output (default: WARNING)
        log_file: Optional path of a rotating log file
        file_level: Level for file logging (default: DEBUG)

    Returns:
        Path to the log file, or None when only the console is used
    """
    for name in PROJECT_LOGGERS:
        logger = logging.getLogger(name)
        for handler in _handlers:
            logger.removeHandler(handler)
    for handler in _handlers:
        handler.close()
    _handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(fmt=constants.LOG_CONSOLE_FORMAT))
    _handlers.append(console_handler)

    log_path = None
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=constants.LOG_MAX_BYTES,
            backupCount=constants.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(fmt=constants.LOG_FORMAT, datefmt=constants.LOG_DATE_FORMAT))
        _handlers.append(file_handler)

    lowest_level = min(handler.level for handler in _handlers)
    for name in PROJECT_LOGGERS:
        logger = logging.getLogger(name)
        logger.setLevel(lowest_level)
        logger.propagate = False
        for handler in _handlers:
            logger.addHandler(handler)

    return log_path
