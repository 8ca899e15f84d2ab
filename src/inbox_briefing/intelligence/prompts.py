"""Prompt templates for the inbox briefing session."""

from __future__ import annotations

import json
from collections.abc import Sequence
from textwrap import dedent

from inbox_briefing.core.models import EmailMessage

COOPERATIVE_PROMPT = "Summarize my current inbox."
FORCED_PROMPT = "You already have the data. Call submitSummary now."


def build_system_prompt() -> str:
    """Compose the standing instructions for the briefing assistant."""
    prompt = """
    You are a concise executive assistant producing a spoken voicemail-style
    summary of the user's unread email.

    Protocol:
    - Call getUnreadEmails first to read the inbox.
    - Then call submitSummary exactly once with the complete summary.
    - Never answer in plain text instead of calling submitSummary.

    Hard rules:
    - "unreadCount" must equal the number of emails returned by getUnreadEmails.
    - "important" holds at most 8 entries and "quickHits" at most 12.
    - "speakable" must be under 120 seconds when spoken.
    - If there are no unread emails, still call submitSummary with
      unreadCount 0, empty lists, and a cheerful speakable of 10 seconds max.
    - Avoid reading long subject lines verbatim. Summarize.
    """
    return dedent(prompt).strip()


def build_forced_prompt(emails: Sequence[EmailMessage] | None) -> str:
    """Compose the retry prompt, replaying cached emails when available."""
    if emails is None:
        return FORCED_PROMPT
    payload = json.dumps([email.to_payload() for email in emails], indent=2)
    return f"{FORCED_PROMPT}\n\nUnread emails:\n{payload}"


__all__ = [
    "COOPERATIVE_PROMPT",
    "FORCED_PROMPT",
    "build_forced_prompt",
    "build_system_prompt",
]
