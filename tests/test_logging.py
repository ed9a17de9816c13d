"""Tests for logging utilities."""

from __future__ import annotations

import logging

from scopedb.core.config import LoggingSettings
from scopedb.core.logging import WORKER_LOGGER, configure_logging


def test_configure_logging_sets_root_level() -> None:
    """configure_logging should set the root logger level according to settings."""

    settings = LoggingSettings(level="DEBUG", structured=False)
    configure_logging(settings)
    assert logging.getLogger().level == logging.DEBUG


def test_worker_logger_level_can_differ_from_root() -> None:
    settings = LoggingSettings(level="INFO", structured=True, worker_level="ERROR")
    configure_logging(settings)
    assert logging.getLogger().level == logging.INFO
    assert logging.getLogger(WORKER_LOGGER).level == logging.ERROR
