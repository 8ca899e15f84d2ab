"""Inbox Briefing: unread email summaries delivered by phone."""

__version__ = "0.1.0"
