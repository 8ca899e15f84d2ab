"""Session observers reporting summarization progress."""

from __future__ import annotations

import logging

from inbox_briefing.core.interfaces import SessionObserver
from inbox_briefing.core.models import CapabilityCall, SessionStep

LOGGER = logging.getLogger(__name__)


class LoggingObserver(SessionObserver):
    """Write session progress to the standard logging module."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER

    def on_attempt_start(self, attempt: int, policy: str) -> None:
        self._logger.info("Attempt %d started with %s policy", attempt, policy)

    def on_step(self, attempt: int, step: SessionStep) -> None:
        names = ", ".join(call.name for call in step.calls) or "none"
        self._logger.debug(
            "Attempt %d step %d finished (calls: %s)", attempt, step.index, names
        )

    def on_capability_call(self, attempt: int, call: CapabilityCall) -> None:
        self._logger.info("Attempt %d invoking %s", attempt, call.name)

    def on_attempt_end(self, attempt: int, submitted: bool) -> None:
        if submitted:
            self._logger.info("Attempt %d produced a valid summary", attempt)
        else:
            self._logger.warning("Attempt %d ended without a valid summary", attempt)


__all__ = ["LoggingObserver"]
