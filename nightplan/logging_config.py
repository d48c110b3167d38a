"""
NIGHTPLAN Logging Configuration

All project loggers live under the ``nightplan`` namespace. Call
``setup_logging`` (or ``configure_logging`` with a loaded config) once at
startup to attach a stdout handler and, optionally, a size-rotated log file.

Usage:
    from nightplan.logging_config import setup_logging, get_logger

    setup_logging(log_level="INFO", log_file="nightplan.log")

    logger = get_logger(__name__)
    logger.info("Sequence placed")

Per-package verbosity:
    set_service_level("scheduling", "DEBUG")  # every slot probe
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from nightplan.config import NightplanConfig

ROOT_LOGGER_NAME = "nightplan"

DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _level(name: str) -> int:
    # Unknown names fall back to INFO
    return LOG_LEVELS.get(name.upper(), logging.INFO)


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    logger.addHandler(handler)


def setup_logging(
    log_level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str | Path] = None,
    max_bytes: int = MAX_LOG_BYTES,
    backup_count: int = LOG_BACKUP_COUNT,
) -> None:
    """Configure the ``nightplan`` logger.

    Re-running replaces the handlers installed by a previous call.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (case-insensitive)
        log_file: Also write to this file, rotating at ``max_bytes``.
                  Parent directories are created.
        max_bytes: Rotation size for the log file
        backup_count: Rotated files to keep
    """
    level = _level(log_level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    _attach(logger, logging.StreamHandler(sys.stdout), level)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        _attach(
            logger,
            RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count),
            level,
        )


def configure_logging(config: "NightplanConfig") -> None:
    """Apply ``log_level`` and ``log_file`` from a loaded configuration."""
    setup_logging(log_level=config.log_level, log_file=config.log_file)


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, placed under the ``nightplan`` namespace.

    Args:
        name: Usually the caller's ``__name__``; the prefix is added unless
              already present.
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_service_level(service_name: str, level: str) -> None:
    """Override the level of one service package.

    Args:
        service_name: Package under ``services`` (e.g. "scheduling")
        level: Level name; unknown names mean INFO
    """
    logging.getLogger(f"{ROOT_LOGGER_NAME}.services.{service_name}").setLevel(_level(level))
