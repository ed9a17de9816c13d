"""Logging configuration helpers."""

from __future__ import annotations

import logging
import logging.config
from typing import Any

from .config import LoggingSettings

# Per-worker failures are logged here; a 100-worker run is noisy at DEBUG.
WORKER_LOGGER = "scopedb.core.execution"


def _formatter(structured: bool) -> dict[str, Any]:
    """Return a dictConfig formatter fragment."""
    if structured:
        return {
            "format": (
                "time={asctime} level={levelname} logger={name} "
                "thread={threadName} msg={message!r}"
            ),
            "style": "{",
        }
    return {"format": "%(asctime)s %(levelname)s [%(threadName)s] %(name)s %(message)s"}


def configure_logging(settings: LoggingSettings) -> None:
    """Configure application logging according to provided settings."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": _formatter(settings.structured)},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": settings.level,
                },
            },
            "loggers": {
                WORKER_LOGGER: {"level": settings.worker_level or settings.level},
            },
            "root": {
                "handlers": ["console"],
                "level": settings.level,
            },
        }
    )


__all__ = ["WORKER_LOGGER", "configure_logging"]
