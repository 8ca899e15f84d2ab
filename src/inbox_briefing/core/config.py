"""Application configuration models and loader utilities."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, cast

from dotenv import dotenv_values
from pydantic import BaseModel, Field


class GmailSettings(BaseModel):
    """Settings controlling Gmail API access."""

    client_id: str | None = Field(default=None, description="OAuth client ID")
    client_secret: str | None = Field(
        default=None, description="OAuth client secret"
    )
    refresh_token: str | None = Field(
        default=None, description="Long-lived OAuth refresh token"
    )
    query: str = Field(
        default="is:unread newer_than:2d", description="Gmail search query"
    )
    max_results: int = Field(
        default=15, ge=1, le=500, description="Maximum messages per briefing"
    )
    timeout_seconds: int = Field(
        default=20, description="Request timeout for Gmail calls"
    )


class LlmSettings(BaseModel):
    """Settings for the Gemini generative backend."""

    base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Generative Language API base URL",
    )
    api_key: str | None = Field(default=None, description="Gemini API key")
    model: str = Field(default="gemini-2.0-flash", description="Model identifier")
    timeout_seconds: int = Field(
        default=60, description="Request timeout for LLM calls"
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for LLM completions",
    )
    max_output_tokens: int | None = Field(
        default=2048,
        ge=32,
        description="Maximum tokens to request from the provider",
    )


class SummarizerSettings(BaseModel):
    """Retry and step bounds for the summarization workflow."""

    max_attempts: int = Field(
        default=2, ge=1, description="Attempts before giving up"
    )
    forced_max_steps: int = Field(
        default=5, ge=1, description="Step cap for forced-submission attempts"
    )
    cooperative_max_steps: int = Field(
        default=10, ge=1, description="Safety cap for the first attempt"
    )
    enforce_unread_count: bool = Field(
        default=False,
        description="Reject submissions whose unreadCount differs from the fetch",
    )


class SpeechSettings(BaseModel):
    """Settings for ElevenLabs speech synthesis."""

    base_url: str = Field(
        default="https://api.elevenlabs.io", description="ElevenLabs API URL"
    )
    api_key: str | None = Field(default=None, description="ElevenLabs API key")
    voice_id: str | None = Field(default=None, description="Voice identifier")
    model_id: str = Field(
        default="eleven_multilingual_v2", description="Synthesis model"
    )
    stability: float = Field(default=0.4, ge=0.0, le=1.0)
    similarity_boost: float = Field(default=0.8, ge=0.0, le=1.0)
    timeout_seconds: int = Field(default=60)


class TelephonySettings(BaseModel):
    """Settings for Twilio call placement."""

    base_url: str = Field(
        default="https://api.twilio.com", description="Twilio REST API URL"
    )
    account_sid: str | None = Field(default=None, description="Account SID")
    auth_token: str | None = Field(default=None, description="Auth token")
    from_number: str | None = Field(default=None, description="Caller number")
    to_number: str | None = Field(default=None, description="Number to call")
    greeting: str = Field(
        default="Good morning. Here is your unread email summary.",
        description="Sentence spoken before the audio plays",
    )
    timeout_seconds: int = Field(default=20)


class StorageSettings(BaseModel):
    """Settings for audio persistence."""

    audio_dir: Path = Field(
        default=Path("./audio"), description="Directory receiving MP3 files"
    )
    public_base_url: str = Field(
        default="http://localhost:8000/",
        description="Public URL under which audio_dir is served",
    )


class LoggingSettings(BaseModel):
    """Logging preferences."""

    level: str = Field(default="INFO", description="Root logging level")
    structured: bool = Field(
        default=False, description="Emit key=value log lines instead of plain text"
    )


class JobSettings(BaseModel):
    """Settings for the scheduled daily job."""

    timeout_seconds: int = Field(
        default=300, ge=1, description="Abandon the run after this many seconds"
    )


class AppSettings(BaseModel):
    """Aggregated application configuration."""

    gmail: GmailSettings = Field(default_factory=GmailSettings)
    llm: LlmSettings = Field(default_factory=LlmSettings)
    summarizer: SummarizerSettings = Field(default_factory=SummarizerSettings)
    speech: SpeechSettings = Field(default_factory=SpeechSettings)
    telephony: TelephonySettings = Field(default_factory=TelephonySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    job: JobSettings = Field(default_factory=JobSettings)


ENV_PREFIX = "INBOX_BRIEFING_"


def _normalize_key(raw_key: str) -> list[str]:
    """Convert an environment variable key into a nested attribute path."""
    trimmed = raw_key.removeprefix(ENV_PREFIX)
    return [segment.lower() for segment in trimmed.split("__") if segment]


def _merge_into_tree(tree: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a value to a nested dictionary given a path."""
    cursor = tree
    for segment in path[:-1]:
        next_node = cursor.setdefault(segment, {})
        cursor = cast(dict[str, Any], next_node)
    cursor[path[-1]] = value


def _collect_env_values(
    env_file: Path | str | None, *, include_environment: bool = True
) -> dict[str, Any]:
    """Load configuration values from environment variables and optional file."""
    collected: dict[str, Any] = {}

    file_values = {}
    if env_file:
        env_path = Path(env_file)
        if env_path.is_file():
            file_values = {
                key: value
                for key, value in dotenv_values(env_path).items()
                if key and key.startswith(ENV_PREFIX)
            }

    env_values = {}
    if include_environment:
        env_values = {
            key: value
            for key, value in os.environ.items()
            if key.startswith(ENV_PREFIX)
        }

    combined: dict[str, Any] = {**file_values, **env_values}

    for key, value in combined.items():
        path = _normalize_key(key)
        if not path:
            continue
        normalized_value: Any = value
        if isinstance(value, str) and value == "":
            normalized_value = None
        elif isinstance(value, str):
            lowercase_value = value.lower()
            if lowercase_value == "true":
                normalized_value = True
            elif lowercase_value == "false":
                normalized_value = False
        _merge_into_tree(collected, path, normalized_value)

    return collected


@lru_cache(maxsize=1)
def load_app_settings(
    env_file: Path | str | None = None,
    *,
    include_environment: bool = True,
    **overrides: Any,
) -> AppSettings:
    """Load application settings, applying env files and overrides."""
    collected = _collect_env_values(
        env_file, include_environment=include_environment
    )
    if overrides:
        collected.update(overrides)
    return AppSettings.model_validate(collected)


__all__ = [
    "AppSettings",
    "GmailSettings",
    "JobSettings",
    "LlmSettings",
    "LoggingSettings",
    "SpeechSettings",
    "StorageSettings",
    "SummarizerSettings",
    "TelephonySettings",
    "load_app_settings",
]
