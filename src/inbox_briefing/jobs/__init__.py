"""Scheduled jobs."""

from .daily import DailyBriefingJob

__all__ = ["DailyBriefingJob"]
