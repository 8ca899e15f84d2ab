"""Local filesystem storage for synthesized audio."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import UTC, datetime
from pathlib import Path
from urllib.parse import urljoin

from ..core.config import StorageSettings
from ..core.interfaces import AudioStore

LOGGER = logging.getLogger(__name__)


def new_audio_key(now: datetime | None = None) -> str:
    """Return a unique, date-partitioned key for an MP3 file."""
    moment = now or datetime.now(tz=UTC)
    return f"summaries/{moment.date().isoformat()}/{uuid.uuid4()}.mp3"


class LocalAudioStore(AudioStore):
    """Write MP3 files under a directory served at a public base URL."""

    def __init__(self, settings: StorageSettings) -> None:
        self._root = Path(settings.audio_dir)
        self._base_url = settings.public_base_url.rstrip("/") + "/"

    async def put_mp3(self, key: str, data: bytes) -> str:
        target = self._resolve(key)
        await asyncio.to_thread(_write_bytes, target, data)
        LOGGER.info("Stored %d bytes at %s", len(data), target)
        return urljoin(self._base_url, key)

    def _resolve(self, key: str) -> Path:
        target = (self._root / key).resolve()
        if not target.is_relative_to(self._root.resolve()):
            raise ValueError(f"Audio key escapes storage root: {key!r}")
        return target


def _write_bytes(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


__all__ = ["LocalAudioStore", "new_audio_key"]
