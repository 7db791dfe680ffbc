import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from .config import Settings

LOGGER_NAME = "bdd_e2e"
MAX_LOG_BYTES = 5 * 1024 * 1024
COMBINED_BACKUPS = 5
ERROR_BACKUPS = 3

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s]: %(message)s"

# Level names as written in LOG_LEVEL
LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def resolve_level(settings: Settings) -> int:
    if settings.debug_mode:
        return logging.DEBUG
    return LEVELS.get(settings.log_level.lower(), logging.INFO)


def setup_logging(settings: Settings, logs_dir: Optional[Path] = None) -> logging.Logger:
    """
    Configure the framework logger with console and rotating file output.

    Safe to call more than once; handlers are only attached the first time.

    Args:
        settings: Resolved settings (log level, reports directory)
        logs_dir: Override for the log directory, defaults to <reports>/logs

    Returns:
        The configured "bdd_e2e" logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_level(settings))

    if getattr(logger, "_bdd_e2e_configured", False):
        return logger

    logs_dir = Path(logs_dir or Path(settings.reports_dir) / "logs")
    logs_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    combined = RotatingFileHandler(
        logs_dir / "combined.log", maxBytes=MAX_LOG_BYTES, backupCount=COMBINED_BACKUPS, encoding="utf-8"
    )
    combined.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(combined)

    errors = RotatingFileHandler(
        logs_dir / "error.log", maxBytes=MAX_LOG_BYTES, backupCount=ERROR_BACKUPS, encoding="utf-8"
    )
    errors.setLevel(logging.ERROR)
    errors.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(errors)

    logger.propagate = False
    logger._bdd_e2e_configured = True
    return logger


def reset_logging() -> None:
    """Detach and close all handlers (used between test runs)"""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger._bdd_e2e_configured = False
