"""Daily job: summarize the inbox and phone the user."""

from __future__ import annotations

import logging

from ..core.config import AppSettings
from ..core.interfaces import (
    AudioStore,
    CallPlacer,
    EmailSource,
    GenerativeBackend,
    SpeechSynthesizer,
)
from ..core.models import DailyReport
from ..intelligence import GeminiClient, SummarizationService
from ..speech import ElevenLabsClient
from ..storage import LocalAudioStore, new_audio_key
from ..telephony import TwilioCallPlacer
from ..transport import GmailClient

LOGGER = logging.getLogger(__name__)


class DailyBriefingJob:
    """Fetch, summarize, synthesize, store and call, in that order."""

    def __init__(
        self,
        *,
        source: EmailSource,
        model: GenerativeBackend,
        summarizer: SummarizationService,
        synthesizer: SpeechSynthesizer,
        audio_store: AudioStore,
        call_placer: CallPlacer,
    ) -> None:
        self._source = source
        self._model = model
        self._summarizer = summarizer
        self._synthesizer = synthesizer
        self._audio_store = audio_store
        self._call_placer = call_placer

    @classmethod
    def from_settings(cls, settings: AppSettings) -> DailyBriefingJob:
        """Wire the production adapters from configuration."""
        return cls(
            source=GmailClient(settings.gmail),
            model=GeminiClient(settings.llm),
            summarizer=SummarizationService(
                settings.summarizer,
                query=settings.gmail.query,
                max_results=settings.gmail.max_results,
            ),
            synthesizer=ElevenLabsClient(settings.speech),
            audio_store=LocalAudioStore(settings.storage),
            call_placer=TwilioCallPlacer(settings.telephony),
        )

    async def run(self) -> DailyReport:
        """Execute one briefing; any failure aborts before the call is placed."""
        LOGGER.info("Starting daily briefing")
        summary = await self._summarizer.summarize(self._source, self._model)

        audio = await self._synthesizer.synthesize(summary.speakable)
        key = new_audio_key()
        audio_url = await self._audio_store.put_mp3(key, audio)
        call_sid = await self._call_placer.place_call(audio_url)

        LOGGER.info(
            "Daily briefing delivered: %d unread, call %s",
            summary.unread_count,
            call_sid,
        )
        return DailyReport(
            unread_count=summary.unread_count,
            headline=summary.headline,
            audio_key=key,
            audio_url=audio_url,
            call_sid=call_sid,
        )


__all__ = ["DailyBriefingJob"]
