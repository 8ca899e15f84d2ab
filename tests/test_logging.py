"""Tests for logging utilities."""

from __future__ import annotations

import logging

from inbox_briefing.core.config import LoggingSettings
from inbox_briefing.core.logging import configure_logging


def test_configure_logging_sets_root_level() -> None:
    """configure_logging should set the root logger level according to settings."""

    settings = LoggingSettings(level="DEBUG", structured=False)
    configure_logging(settings)
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_quiets_http_client_loggers() -> None:
    configure_logging(LoggingSettings(level="DEBUG", structured=True))
    assert logging.getLogger("httpx").level == logging.WARNING


def test_structured_logging_emits_key_value_lines() -> None:
    configure_logging(LoggingSettings(level="INFO", structured=True))
    record = logging.LogRecord("inbox", logging.INFO, __file__, 1, "hello", None, None)

    lines = [handler.format(record) for handler in logging.getLogger().handlers]

    assert any(
        "level=INFO" in line and line.endswith("logger=inbox msg=hello")
        for line in lines
    )
