"""Logging setup for the terminal client."""

from __future__ import annotations

import logging
from logging.config import dictConfig

from helpdesk_tui.core.config import Settings


def _handler_config(settings: Settings, level: int) -> dict[str, object]:
    # The terminal is owned by the UI, so records never go to stdout/stderr.
    if settings.log_file:
        return {
            "class": "logging.FileHandler",
            "formatter": "default",
            "level": level,
            "filename": settings.log_file,
            "encoding": "utf-8",
        }
    return {
        "class": "textual.logging.TextualHandler",
        "formatter": "default",
        "level": level,
    }


def configure_logging(settings: Settings) -> logging.Logger:
    """Configure the application logger based on settings."""

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": settings.log_format,
                }
            },
            "handlers": {
                "default": _handler_config(settings, level),
            },
            "root": {
                "handlers": ["default"],
                "level": level,
            },
            "loggers": {
                "httpx": {"level": max(level, logging.WARNING)},
                "httpcore": {"level": max(level, logging.WARNING)},
            },
        }
    )

    logger = logging.getLogger("helpdesk_tui")
    logger.setLevel(level)
    return logger
