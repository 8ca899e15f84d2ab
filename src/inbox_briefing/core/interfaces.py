"""Protocol interfaces for decoupling components."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .models import (
    CapabilityCall,
    EmailMessage,
    ModelRequest,
    ModelTurn,
    SessionStep,
    StepTrace,
)


class SourceUnavailable(RuntimeError):
    """Raised when the email source cannot be reached or rejects credentials."""


class SummarizationFailed(RuntimeError):
    """Raised when no attempt produced a valid summary submission."""

    def __init__(self, attempts: int, traces: Sequence[StepTrace] = ()) -> None:
        """Record the attempt count and step traces for diagnosis."""
        super().__init__(f"No valid summary submitted after {attempts} attempt(s)")
        self.attempts = attempts
        self.traces = tuple(traces)


class EmailSource(Protocol):
    """Abstraction over a provider of unread messages such as Gmail."""

    async def fetch(self, query: str, max_results: int) -> Sequence[EmailMessage]:
        """Return at most ``max_results`` messages matching ``query``."""
        raise NotImplementedError


class GenerativeBackend(Protocol):
    """A language model able to call declared capabilities."""

    @property
    def provider_id(self) -> str:
        """Identifier describing the backing model/provider."""
        raise NotImplementedError

    async def complete(self, request: ModelRequest) -> ModelTurn:
        """Perform one model round trip for ``request``."""
        raise NotImplementedError


class SessionObserver(Protocol):
    """Receives progress notifications from a summarization run."""

    def on_attempt_start(self, attempt: int, policy: str) -> None:
        """Called before an attempt's session starts."""
        raise NotImplementedError

    def on_step(self, attempt: int, step: SessionStep) -> None:
        """Called after each model round trip."""
        raise NotImplementedError

    def on_capability_call(self, attempt: int, call: CapabilityCall) -> None:
        """Called before a capability call is executed."""
        raise NotImplementedError

    def on_attempt_end(self, attempt: int, submitted: bool) -> None:
        """Called once an attempt's trace has been scanned."""
        raise NotImplementedError


class SpeechSynthesizer(Protocol):
    """Turns text into MP3 audio."""

    async def synthesize(self, text: str) -> bytes:
        """Return MP3 bytes speaking ``text``."""
        raise NotImplementedError


class AudioStore(Protocol):
    """Stores synthesized audio and exposes it by URL."""

    async def put_mp3(self, key: str, data: bytes) -> str:
        """Persist ``data`` under ``key`` and return a fetchable URL."""
        raise NotImplementedError


class CallPlacer(Protocol):
    """Places an outbound phone call that plays an audio URL."""

    async def place_call(self, audio_url: str) -> str:
        """Start the call and return the provider's call identifier."""
        raise NotImplementedError


__all__ = [
    "AudioStore",
    "CallPlacer",
    "EmailSource",
    "GenerativeBackend",
    "SessionObserver",
    "SourceUnavailable",
    "SpeechSynthesizer",
    "SummarizationFailed",
]
