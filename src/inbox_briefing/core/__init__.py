"""Core utilities for configuration, logging, and shared models."""

from .config import AppSettings, SummarizerSettings, load_app_settings
from .interfaces import SourceUnavailable, SummarizationFailed
from .logging import configure_logging

__all__ = [
    "AppSettings",
    "SourceUnavailable",
    "SummarizationFailed",
    "SummarizerSettings",
    "configure_logging",
    "load_app_settings",
]
