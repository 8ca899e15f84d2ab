"""Twilio adapter placing the briefing call."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from xml.sax.saxutils import escape

import httpx

from ..core.config import TelephonySettings
from ..core.interfaces import CallPlacer

LOGGER = logging.getLogger(__name__)


class TelephonyError(RuntimeError):
    """Raised when the call cannot be placed."""


def build_twiml(greeting: str, audio_url: str) -> str:
    """Return a voice response that greets, plays the audio and hangs up."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        "<Response>"
        f"<Say>{escape(greeting)}</Say>"
        f"<Play>{escape(audio_url)}</Play>"
        "<Hangup/>"
        "</Response>"
    )


class TwilioCallPlacer(CallPlacer):
    """Start outbound calls through the Twilio REST API."""

    def __init__(
        self, settings: TelephonySettings, *, client: httpx.AsyncClient | None = None
    ) -> None:
        self._settings = settings
        self._client = client

    async def place_call(self, audio_url: str) -> str:
        """Call the configured number and return the call SID."""
        settings = self._settings
        if not (
            settings.account_sid
            and settings.auth_token
            and settings.from_number
            and settings.to_number
        ):
            raise TelephonyError("Twilio credentials and phone numbers are required")

        endpoint = (
            f"{settings.base_url.rstrip('/')}/2010-04-01/Accounts/"
            f"{settings.account_sid}/Calls.json"
        )
        form = {
            "To": settings.to_number,
            "From": settings.from_number,
            "Twiml": build_twiml(settings.greeting, audio_url),
        }
        try:
            async with self._session() as client:
                response = await client.post(
                    endpoint,
                    data=form,
                    auth=(settings.account_sid, settings.auth_token),
                )
                if response.status_code >= 400:
                    LOGGER.error("Twilio rejected the call: %s", response.text)
                response.raise_for_status()
                call_sid = response.json().get("sid")
        except (httpx.HTTPError, ValueError) as exc:
            raise TelephonyError("Twilio request failed") from exc

        if not isinstance(call_sid, str) or not call_sid:
            raise TelephonyError("Twilio response did not include a call SID")
        LOGGER.info("Placed call %s", call_sid)
        return call_sid

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._settings.timeout_seconds) as client:
            yield client


__all__ = ["TelephonyError", "TwilioCallPlacer", "build_twiml"]
