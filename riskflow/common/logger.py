"""Logging setup for RiskFlow.

Modules log through ``logging.getLogger(__name__)``. Configuring the
``riskflow`` package logger once at startup routes all of them to the
console and, when enabled, to a size-rotated file.
"""

import logging
import logging.handlers
import os
from typing import Optional

from riskflow.core.config import Settings, get_settings

PACKAGE_LOGGER = "riskflow"

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    settings: Optional[Settings] = None,
    *,
    name: str = PACKAGE_LOGGER,
    console: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Attach handlers to the package logger according to settings.

    Calling it again only updates the level, so tests and the worker can
    import the app without stacking handlers.

    Args:
        settings: Source of log_level, file_logging and log_dir
        name: Logger to configure
        console: Also log to stderr
        max_bytes: Rotate the log file at this size
        backup_count: Rotated files to keep

    Raises:
        ValueError: If settings.log_level is not a standard level name
    """
    settings = settings or get_settings()
    level = settings.log_level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {settings.log_level}. Must be one of: {', '.join(LOG_LEVELS)}")

    logger = logging.getLogger(name)
    logger.setLevel(level)
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if settings.file_logging:
        os.makedirs(settings.log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            os.path.join(settings.log_dir, f"{name}.log"),
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if level != "DEBUG":
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
