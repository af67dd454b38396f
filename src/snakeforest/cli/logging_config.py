"""Logging setup shared by the command line entry points."""

from __future__ import annotations

import logging
import os

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL_ENV_VAR = "SNAKEFOREST_LOG_LEVEL"
LOG_LEVEL_CHOICES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(*, level: str | None = None) -> logging.Logger:
    """Configure root logging for the engine.

    Args:
        level: Optional explicit log level. Falls back to ``SNAKEFOREST_LOG_LEVEL``
            or WARNING when not provided.

    Returns:
        The ``snakeforest`` package logger.
    """
    raw_level = level if level is not None else os.getenv(LOG_LEVEL_ENV_VAR)
    resolved_level = (raw_level or "WARNING").upper()
    if resolved_level not in LOG_LEVEL_CHOICES:
        raise ValueError(f"unsupported log level: {raw_level}")
    logging.basicConfig(level=resolved_level, format=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT)

    app_logger = logging.getLogger("snakeforest")
    app_logger.setLevel(resolved_level)
    app_logger.debug("logging configured level=%s", resolved_level)
    return app_logger
