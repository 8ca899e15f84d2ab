"""Command-line entry point for Inbox Briefing."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Any

from inbox_briefing.core import (
    AppSettings,
    SourceUnavailable,
    SummarizationFailed,
    configure_logging,
    load_app_settings,
)
from inbox_briefing.intelligence import GeminiClient, LLMError, SummarizationService
from inbox_briefing.jobs import DailyBriefingJob
from inbox_briefing.speech import SpeechError
from inbox_briefing.telephony import TelephonyError
from inbox_briefing.transport import GmailClient

LOGGER = logging.getLogger(__name__)

_JOB_ERRORS = (
    SourceUnavailable,
    SummarizationFailed,
    LLMError,
    SpeechError,
    TelephonyError,
    TimeoutError,
)


def build_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(description="Inbox Briefing phone summaries")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file containing configuration overrides.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="info",
        choices=["info", "summarize", "daily"],
        help="Operation to execute.",
    )
    return parser


def execute(args: argparse.Namespace, settings: AppSettings) -> int:
    """Execute the requested CLI command and return the exit status."""
    command = args.command
    if command == "info":
        print("Inbox Briefing is ready. Configure Gmail, Gemini, ElevenLabs, Twilio.")
        print(f"Gmail query: {settings.gmail.query}")
        print(f"Model: {settings.llm.model}")
        print(f"Audio directory: {settings.storage.audio_dir}")
        return 0

    try:
        if command == "summarize":
            asyncio.run(_run_with_timeout(_summarize(settings), settings))
        elif command == "daily":
            asyncio.run(_run_with_timeout(_daily(settings), settings))
    except _JOB_ERRORS as exc:
        LOGGER.error("%s failed: %s", command, exc)
        print(f"{command.capitalize()} failed: {exc}")
        return 1
    return 0


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    settings = load_app_settings(env_file=args.env_file)
    configure_logging(settings.logging)
    raise SystemExit(execute(args, settings))


async def _run_with_timeout(
    coro: Coroutine[Any, Any, None], settings: AppSettings
) -> None:
    await asyncio.wait_for(coro, timeout=settings.job.timeout_seconds)


async def _summarize(settings: AppSettings) -> None:
    """Print the summary for the current inbox without calling anyone."""
    service = SummarizationService(
        settings.summarizer,
        query=settings.gmail.query,
        max_results=settings.gmail.max_results,
    )
    summary = await service.summarize(
        GmailClient(settings.gmail), GeminiClient(settings.llm)
    )
    print(json.dumps(summary.to_payload(), indent=2))


async def _daily(settings: AppSettings) -> None:
    """Run the full briefing and report the outcome."""
    report = await DailyBriefingJob.from_settings(settings).run()
    print(f"Called with {report.unread_count} unread email(s): {report.headline}")
    print(f"Call SID: {report.call_sid}")
    print(f"Audio: {report.audio_url}")


if __name__ == "__main__":
    main()
