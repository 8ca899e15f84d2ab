"""Core domain models used across the application."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_IMPORTANT = 8
MAX_QUICK_HITS = 12


@dataclass(frozen=True, slots=True)
class EmailMessage:
    """Unread message metadata as returned by an email source."""

    id: str
    sender: str
    subject: str
    date: str
    snippet: str

    def to_payload(self) -> dict[str, str]:
        """Return the representation handed to the language model."""
        return {
            "id": self.id,
            "from": self.sender,
            "subject": self.subject,
            "date": self.date,
            "snippet": self.snippet,
        }


class _SummaryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ImportantEmail(_SummaryModel):
    """A message the listener should act on."""

    sender: str = Field(alias="from", description="Sender name or email")
    subject: str = Field(description="Email subject line")
    why_important: str = Field(
        alias="whyImportant",
        description="Reason why this email is flagged as important",
    )
    suggested_action: str = Field(
        alias="suggestedAction", description="Recommended action for the user"
    )


class QuickHit(_SummaryModel):
    """A message worth a one-line mention."""

    sender: str = Field(alias="from", description="Sender name or email")
    subject: str = Field(description="Email subject line")
    one_line: str = Field(
        alias="oneLine", description="One line summary of the email content"
    )


class CallSummary(_SummaryModel):
    """Structured inbox summary submitted by the model."""

    unread_count: int = Field(
        alias="unreadCount",
        ge=0,
        description="Total number of unread emails analyzed",
    )
    headline: str = Field(
        description="A punchy 5-8 word headline summarizing the inbox state"
    )
    important: list[ImportantEmail] = Field(
        max_length=MAX_IMPORTANT,
        description="Critical emails requiring attention (max 8)",
    )
    quick_hits: list[QuickHit] = Field(
        alias="quickHits",
        max_length=MAX_QUICK_HITS,
        description="Other relevant emails to skim (max 12)",
    )
    speakable: str = Field(
        description="Natural language script spoken by TTS (under 120 seconds)"
    )

    @field_validator("unread_count", mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("unreadCount must be a number")
        return value

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase payload consumed downstream."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True, slots=True)
class CapabilityCall:
    """A single capability invocation requested by the model."""

    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)
    call_id: str | None = None


@dataclass(frozen=True, slots=True)
class SessionStep:
    """One model round trip and the capability calls it produced."""

    index: int
    text: str
    calls: tuple[CapabilityCall, ...] = ()


StepTrace = tuple[SessionStep, ...]


@dataclass(frozen=True, slots=True)
class CapabilityDeclaration:
    """Name, description and parameter schema advertised to the model."""

    name: str
    description: str
    parameters: Mapping[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class CapabilityResult:
    """Response returned to the model for a capability call."""

    call: CapabilityCall
    response: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class ModelTurn:
    """Text and capability calls produced by one model round trip."""

    text: str = ""
    calls: tuple[CapabilityCall, ...] = ()


@dataclass(frozen=True, slots=True)
class ModelRequest:
    """Everything a backend needs for the next round trip.

    ``exchanges`` replays the session so far: each model turn paired with the
    results of the capability calls it made.
    """

    system_prompt: str
    user_prompt: str
    capabilities: tuple[CapabilityDeclaration, ...]
    exchanges: tuple[tuple[ModelTurn, tuple[CapabilityResult, ...]], ...] = ()
    forced_capability: str | None = None


@dataclass(frozen=True, slots=True)
class DailyReport:
    """Outcome of a daily briefing run."""

    unread_count: int
    headline: str
    audio_key: str
    audio_url: str
    call_sid: str


__all__ = [
    "MAX_IMPORTANT",
    "MAX_QUICK_HITS",
    "CallSummary",
    "CapabilityCall",
    "CapabilityDeclaration",
    "CapabilityResult",
    "DailyReport",
    "EmailMessage",
    "ImportantEmail",
    "ModelRequest",
    "ModelTurn",
    "QuickHit",
    "SessionStep",
    "StepTrace",
]
