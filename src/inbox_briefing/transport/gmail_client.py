"""Gmail REST adapter providing unread message metadata."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any

import httpx

from ..core.config import GmailSettings
from ..core.interfaces import EmailSource, SourceUnavailable
from ..core.models import EmailMessage

LOGGER = logging.getLogger(__name__)

_METADATA_HEADERS = ("From", "Subject", "Date")


class GmailClient(EmailSource):
    """Fetch unread messages using an OAuth refresh token."""

    TOKEN_URL = "https://oauth2.googleapis.com/token"
    API_BASE = "https://gmail.googleapis.com/gmail/v1/users/me"

    def __init__(
        self, settings: GmailSettings, *, client: httpx.AsyncClient | None = None
    ) -> None:
        """Initialise the client; ``client`` is borrowed and never closed."""
        self._settings = settings
        self._client = client

    async def fetch(self, query: str, max_results: int) -> Sequence[EmailMessage]:
        """Return metadata for up to ``max_results`` messages matching ``query``."""
        try:
            async with self._session() as client:
                access_token = await self._refresh_access_token(client)
                headers = {"Authorization": f"Bearer {access_token}"}
                ids = await self._list_message_ids(client, headers, query, max_results)
                if not ids:
                    LOGGER.info("No messages matched query %r", query)
                    return []
                messages = []
                for message_id in ids:
                    messages.append(
                        await self._fetch_metadata(client, headers, message_id)
                    )
        except httpx.HTTPError as exc:
            raise SourceUnavailable("Gmail request failed") from exc
        except json.JSONDecodeError as exc:
            raise SourceUnavailable("Gmail returned invalid JSON") from exc

        LOGGER.info("Fetched %d message(s) from Gmail", len(messages))
        return messages

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._settings.timeout_seconds) as client:
            yield client

    async def _refresh_access_token(self, client: httpx.AsyncClient) -> str:
        settings = self._settings
        if not (
            settings.client_id and settings.client_secret and settings.refresh_token
        ):
            raise SourceUnavailable("Gmail credentials are not configured")

        response = await client.post(
            self.TOKEN_URL,
            data={
                "client_id": settings.client_id,
                "client_secret": settings.client_secret,
                "refresh_token": settings.refresh_token,
                "grant_type": "refresh_token",
            },
        )
        if response.status_code != 200:
            LOGGER.error("Token refresh failed: %s", response.status_code)
        response.raise_for_status()

        access_token = response.json().get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise SourceUnavailable("Token response did not include an access token")
        LOGGER.debug("Access token refreshed")
        return access_token

    async def _list_message_ids(
        self,
        client: httpx.AsyncClient,
        headers: Mapping[str, str],
        query: str,
        max_results: int,
    ) -> list[str]:
        response = await client.get(
            f"{self.API_BASE}/messages",
            headers=headers,
            params={"q": query, "maxResults": max_results},
        )
        response.raise_for_status()
        listed = response.json().get("messages") or []
        ids = [entry["id"] for entry in listed if entry.get("id")]
        return ids[:max_results]

    async def _fetch_metadata(
        self, client: httpx.AsyncClient, headers: Mapping[str, str], message_id: str
    ) -> EmailMessage:
        LOGGER.debug("Fetching metadata for message %s", message_id)
        response = await client.get(
            f"{self.API_BASE}/messages/{message_id}",
            headers=headers,
            params=[("format", "metadata")]
            + [("metadataHeaders", name) for name in _METADATA_HEADERS],
        )
        response.raise_for_status()
        data = response.json()
        payload_headers = (data.get("payload") or {}).get("headers")
        return EmailMessage(
            id=message_id,
            sender=_header(payload_headers, "From"),
            subject=_header(payload_headers, "Subject"),
            date=_header(payload_headers, "Date"),
            snippet=data.get("snippet") or "",
        )


def _header(headers: list[dict[str, Any]] | None, name: str) -> str:
    """Return the first header value matching ``name`` case-insensitively."""
    wanted = name.lower()
    for entry in headers or []:
        if (entry.get("name") or "").lower() == wanted:
            return entry.get("value") or ""
    return ""


__all__ = ["GmailClient"]
