"""Capabilities exposed to the model during a briefing session."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from inbox_briefing.core.interfaces import EmailSource
from inbox_briefing.core.models import (
    CallSummary,
    CapabilityCall,
    CapabilityDeclaration,
    EmailMessage,
    ImportantEmail,
    MAX_IMPORTANT,
    MAX_QUICK_HITS,
    QuickHit,
)

LOGGER = logging.getLogger(__name__)

GET_UNREAD_EMAILS = "getUnreadEmails"
SUBMIT_SUMMARY = "submitSummary"


class EmailCache:
    """Fetches from the source once and serves the result afterwards.

    One instance lives for a single summarization run. A failed fetch leaves
    the cache empty and propagates the error.
    """

    def __init__(self, source: EmailSource, *, query: str, max_results: int) -> None:
        self._source = source
        self._query = query
        self._max_results = max_results
        self._emails: tuple[EmailMessage, ...] | None = None

    @property
    def emails(self) -> tuple[EmailMessage, ...] | None:
        """Return the cached messages, or ``None`` before the first fetch."""
        return self._emails

    async def get(self) -> tuple[EmailMessage, ...]:
        if self._emails is not None:
            LOGGER.debug("Serving %d cached email(s)", len(self._emails))
            return self._emails
        fetched = await self._source.fetch(self._query, self._max_results)
        self._emails = tuple(fetched)
        LOGGER.info("Cached %d unread email(s)", len(self._emails))
        return self._emails


class SummaryCapabilities:
    """Executes ``getUnreadEmails`` and ``submitSummary`` calls."""

    def __init__(self, cache: EmailCache) -> None:
        self._cache = cache

    @property
    def declarations(self) -> tuple[CapabilityDeclaration, ...]:
        return CAPABILITY_DECLARATIONS

    async def invoke(self, call: CapabilityCall) -> Mapping[str, Any]:
        """Run ``call`` and return the response handed back to the model."""
        if call.name == GET_UNREAD_EMAILS:
            emails = await self._cache.get()
            return {"emails": [email.to_payload() for email in emails]}
        if call.name == SUBMIT_SUMMARY:
            return {"ok": True}
        LOGGER.warning("Model requested unknown capability %r", call.name)
        return {"error": f"Unknown capability '{call.name}'"}


def submitted_payload(arguments: Mapping[str, Any]) -> Mapping[str, Any]:
    """Unwrap the summary from ``submitSummary`` arguments.

    Models either nest the object under ``summary`` or pass it directly.
    """
    nested = arguments.get("summary")
    if isinstance(nested, Mapping):
        return nested
    return arguments


def _description(model: type[BaseModel], field_name: str) -> str:
    return model.model_fields[field_name].description or ""


def _string(model: type[BaseModel], field_name: str) -> dict[str, Any]:
    return {"type": "string", "description": _description(model, field_name)}


def _summary_schema() -> dict[str, Any]:
    important_item = {
        "type": "object",
        "properties": {
            "from": _string(ImportantEmail, "sender"),
            "subject": _string(ImportantEmail, "subject"),
            "whyImportant": _string(ImportantEmail, "why_important"),
            "suggestedAction": _string(ImportantEmail, "suggested_action"),
        },
        "required": ["from", "subject", "whyImportant", "suggestedAction"],
    }
    quick_hit_item = {
        "type": "object",
        "properties": {
            "from": _string(QuickHit, "sender"),
            "subject": _string(QuickHit, "subject"),
            "oneLine": _string(QuickHit, "one_line"),
        },
        "required": ["from", "subject", "oneLine"],
    }
    return {
        "type": "object",
        "properties": {
            "unreadCount": {
                "type": "integer",
                "description": _description(CallSummary, "unread_count"),
            },
            "headline": _string(CallSummary, "headline"),
            "important": {
                "type": "array",
                "maxItems": MAX_IMPORTANT,
                "items": important_item,
                "description": _description(CallSummary, "important"),
            },
            "quickHits": {
                "type": "array",
                "maxItems": MAX_QUICK_HITS,
                "items": quick_hit_item,
                "description": _description(CallSummary, "quick_hits"),
            },
            "speakable": _string(CallSummary, "speakable"),
        },
        "required": ["unreadCount", "headline", "important", "quickHits", "speakable"],
    }


CAPABILITY_DECLARATIONS: tuple[CapabilityDeclaration, ...] = (
    CapabilityDeclaration(
        name=GET_UNREAD_EMAILS,
        description="Fetch the user's unread emails from the inbox.",
    ),
    CapabilityDeclaration(
        name=SUBMIT_SUMMARY,
        description="Submit the final inbox summary. Call exactly once.",
        parameters={
            "type": "object",
            "properties": {"summary": _summary_schema()},
            "required": ["summary"],
        },
    ),
)


__all__ = [
    "CAPABILITY_DECLARATIONS",
    "EmailCache",
    "GET_UNREAD_EMAILS",
    "SUBMIT_SUMMARY",
    "SummaryCapabilities",
    "submitted_payload",
]
