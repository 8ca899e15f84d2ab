"""Attempt controller producing a call summary from the inbox."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from inbox_briefing.core.config import SummarizerSettings
from inbox_briefing.core.interfaces import (
    EmailSource,
    GenerativeBackend,
    SessionObserver,
    SummarizationFailed,
)
from inbox_briefing.core.models import CallSummary, EmailMessage, StepTrace

from .capabilities import (
    SUBMIT_SUMMARY,
    EmailCache,
    SummaryCapabilities,
    submitted_payload,
)
from .observer import LoggingObserver
from .policy import policy_for_attempt
from .prompts import build_system_prompt
from .session import run_session

LOGGER = logging.getLogger(__name__)

MAX_ATTEMPTS = 2
DEFAULT_QUERY = "is:unread newer_than:2d"
DEFAULT_MAX_RESULTS = 15


@dataclass(slots=True)
class AttemptState:
    """Per-invocation state shared by all attempts of one run."""

    cache: EmailCache
    attempt_index: int = 0
    traces: list[StepTrace] = field(default_factory=list)

    @property
    def cached_emails(self) -> tuple[EmailMessage, ...] | None:
        return self.cache.emails


class SummarizationService:
    """Drive the model through fetch-then-submit, retrying with a forced policy."""

    def __init__(
        self,
        settings: SummarizerSettings | None = None,
        *,
        query: str = DEFAULT_QUERY,
        max_results: int = DEFAULT_MAX_RESULTS,
        observer: SessionObserver | None = None,
    ) -> None:
        """Prepare the controller; it keeps no state between runs."""
        self._settings = settings or SummarizerSettings(max_attempts=MAX_ATTEMPTS)
        self._query = query
        self._max_results = max_results
        self._observer = observer or LoggingObserver()
        self._system_prompt = build_system_prompt()

    async def summarize(
        self, source: EmailSource, model: GenerativeBackend
    ) -> CallSummary:
        """Return the first valid summary submitted by ``model``.

        Raises :class:`SummarizationFailed` once every attempt finished
        without a valid ``submitSummary`` call. Errors raised by ``source``
        or ``model`` propagate unchanged.
        """
        state = AttemptState(
            cache=EmailCache(source, query=self._query, max_results=self._max_results)
        )
        capabilities = SummaryCapabilities(state.cache)
        max_attempts = self._settings.max_attempts

        for attempt in range(1, max_attempts + 1):
            state.attempt_index = attempt
            policy = policy_for_attempt(attempt, self._settings)
            self._observer.on_attempt_start(attempt, policy.name)

            trace = await run_session(
                model,
                policy,
                capabilities,
                system_prompt=self._system_prompt,
                observer=self._observer,
                attempt=attempt,
                cached_emails=state.cached_emails,
            )
            state.traces.append(trace)

            summary = self._first_valid_submission(trace, state)
            self._observer.on_attempt_end(attempt, summary is not None)
            if summary is not None:
                LOGGER.info(
                    "Summary accepted on attempt %d (%d unread)",
                    attempt,
                    summary.unread_count,
                )
                return summary

        raise SummarizationFailed(attempts=max_attempts, traces=state.traces)

    def _first_valid_submission(
        self, trace: StepTrace, state: AttemptState
    ) -> CallSummary | None:
        for step in trace:
            for call in step.calls:
                if call.name != SUBMIT_SUMMARY:
                    continue
                try:
                    payload = submitted_payload(call.arguments)
                    summary = CallSummary.model_validate(payload)
                except ValidationError as exc:
                    LOGGER.warning(
                        "Ignoring malformed submission at step %d: %s",
                        step.index,
                        exc.errors(include_url=False, include_input=False),
                    )
                    continue
                if self._count_matches(summary, state.cached_emails):
                    return summary
        return None

    def _count_matches(
        self, summary: CallSummary, emails: tuple[EmailMessage, ...] | None
    ) -> bool:
        if emails is not None and summary.unread_count == len(emails):
            return True
        if self._settings.enforce_unread_count:
            LOGGER.warning(
                "Rejecting submission: unreadCount %d does not match %s fetched",
                summary.unread_count,
                "nothing" if emails is None else len(emails),
            )
            return False
        if emails is not None:
            LOGGER.warning(
                "unreadCount %d differs from %d fetched email(s)",
                summary.unread_count,
                len(emails),
            )
        return True


__all__ = ["AttemptState", "MAX_ATTEMPTS", "SummarizationService"]
