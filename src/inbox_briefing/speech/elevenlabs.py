"""ElevenLabs text-to-speech adapter."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from ..core.config import SpeechSettings
from ..core.interfaces import SpeechSynthesizer

LOGGER = logging.getLogger(__name__)


class SpeechError(RuntimeError):
    """Raised when speech synthesis fails."""


class ElevenLabsClient(SpeechSynthesizer):
    """Convert text to MP3 audio using a configured ElevenLabs voice."""

    def __init__(
        self, settings: SpeechSettings, *, client: httpx.AsyncClient | None = None
    ) -> None:
        self._settings = settings
        self._client = client

    async def synthesize(self, text: str) -> bytes:
        settings = self._settings
        if not settings.api_key or not settings.voice_id:
            raise SpeechError("ElevenLabs API key and voice ID are required")

        base_url = settings.base_url.rstrip("/")
        endpoint = f"{base_url}/v1/text-to-speech/{settings.voice_id}"
        body = {
            "text": text,
            "model_id": settings.model_id,
            "voice_settings": {
                "stability": settings.stability,
                "similarity_boost": settings.similarity_boost,
            },
        }
        try:
            async with self._session() as client:
                response = await client.post(
                    endpoint,
                    json=body,
                    headers={"xi-api-key": settings.api_key, "Accept": "audio/mpeg"},
                    params={"output_format": "mp3_44100_128"},
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise SpeechError("ElevenLabs request failed") from exc

        audio = response.content
        if not audio:
            raise SpeechError("ElevenLabs returned empty audio")
        LOGGER.info("Synthesized %d bytes of audio", len(audio))
        return audio

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._settings.timeout_seconds) as client:
            yield client


__all__ = ["ElevenLabsClient", "SpeechError"]
