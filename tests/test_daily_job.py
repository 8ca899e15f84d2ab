"""Tests for the daily briefing job and CLI wiring."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

import pytest

from inbox_briefing import cli
from inbox_briefing.core.config import AppSettings, SummarizerSettings
from inbox_briefing.core.interfaces import SourceUnavailable
from inbox_briefing.core.models import (
    CapabilityCall,
    EmailMessage,
    ModelRequest,
    ModelTurn,
)
from inbox_briefing.intelligence import (
    GET_UNREAD_EMAILS,
    SUBMIT_SUMMARY,
    GeminiClient,
    SummarizationService,
)
from inbox_briefing.jobs import DailyBriefingJob
from inbox_briefing.storage import LocalAudioStore
from inbox_briefing.telephony import TwilioCallPlacer
from inbox_briefing.transport import GmailClient


class StubSource:
    def __init__(self, emails: Sequence[EmailMessage], error: Exception | None = None):
        self.emails = list(emails)
        self.error = error

    async def fetch(self, query: str, max_results: int) -> Sequence[EmailMessage]:
        if self.error is not None:
            raise self.error
        return self.emails


class SubmittingModel:
    """Fetches, then submits a summary counting what it saw."""

    @property
    def provider_id(self) -> str:
        return "stub"

    async def complete(self, request: ModelRequest) -> ModelTurn:
        if not request.exchanges:
            return ModelTurn(calls=(CapabilityCall(name=GET_UNREAD_EMAILS),))
        _, results = request.exchanges[-1]
        count = len(results[0].response["emails"])
        summary = {
            "unreadCount": count,
            "headline": "One thing to know",
            "important": [],
            "quickHits": [],
            "speakable": f"You have {count} unread email.",
        }
        return ModelTurn(
            calls=(CapabilityCall(name=SUBMIT_SUMMARY, arguments={"summary": summary}),)
        )


class RecordingSynthesizer:
    def __init__(self) -> None:
        self.texts: list[str] = []

    async def synthesize(self, text: str) -> bytes:
        self.texts.append(text)
        return b"mp3"


class RecordingStore:
    def __init__(self) -> None:
        self.keys: list[str] = []

    async def put_mp3(self, key: str, data: bytes) -> str:
        self.keys.append(key)
        return f"https://cdn.test/{key}"


class RecordingPlacer:
    def __init__(self) -> None:
        self.urls: list[str] = []

    async def place_call(self, audio_url: str) -> str:
        self.urls.append(audio_url)
        return "CA1"


def _email() -> EmailMessage:
    return EmailMessage(
        id="m1",
        sender="bank@example.com",
        subject="Statement ready",
        date="Wed, 3 Jan 2024 06:00:00 +0000",
        snippet="Your statement is available",
    )


def _job(
    source: StubSource,
) -> tuple[DailyBriefingJob, RecordingSynthesizer, RecordingStore, RecordingPlacer]:
    synthesizer = RecordingSynthesizer()
    store = RecordingStore()
    placer = RecordingPlacer()
    job = DailyBriefingJob(
        source=source,
        model=SubmittingModel(),
        summarizer=SummarizationService(SummarizerSettings()),
        synthesizer=synthesizer,
        audio_store=store,
        call_placer=placer,
    )
    return job, synthesizer, store, placer


@pytest.mark.asyncio
async def test_daily_job_delivers_summary_by_phone() -> None:
    job, synthesizer, store, placer = _job(StubSource([_email()]))

    report = await job.run()

    assert report.unread_count == 1
    assert report.call_sid == "CA1"
    assert synthesizer.texts == ["You have 1 unread email."]
    assert store.keys == [report.audio_key]
    assert placer.urls == [report.audio_url]
    assert report.audio_url.endswith(".mp3")


@pytest.mark.asyncio
async def test_daily_job_stops_when_source_is_unavailable() -> None:
    job, synthesizer, store, placer = _job(
        StubSource([], error=SourceUnavailable("invalid_grant"))
    )

    with pytest.raises(SourceUnavailable):
        await job.run()

    assert synthesizer.texts == []
    assert store.keys == []
    assert placer.urls == []


def test_from_settings_wires_production_adapters() -> None:
    job = DailyBriefingJob.from_settings(AppSettings())

    assert isinstance(job._source, GmailClient)
    assert isinstance(job._model, GeminiClient)
    assert isinstance(job._audio_store, LocalAudioStore)
    assert isinstance(job._call_placer, TwilioCallPlacer)


def test_cli_summarize_reports_missing_credentials(
    capsys: pytest.CaptureFixture[str],
) -> None:
    args = argparse.Namespace(command="summarize", env_file=None)

    status = cli.execute(args, AppSettings())

    assert status == 1
    assert "Summarize failed" in capsys.readouterr().out


def test_cli_info_prints_configuration(capsys: pytest.CaptureFixture[str]) -> None:
    args = argparse.Namespace(command="info", env_file=None)

    status = cli.execute(args, AppSettings())

    assert status == 0
    assert "is:unread newer_than:2d" in capsys.readouterr().out
