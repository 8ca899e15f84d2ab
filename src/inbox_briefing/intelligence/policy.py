"""Generation policies applied to each summarization attempt."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import ValidationError

from inbox_briefing.core.config import SummarizerSettings
from inbox_briefing.core.models import (
    CallSummary,
    CapabilityCall,
    EmailMessage,
    SessionStep,
)

from .capabilities import SUBMIT_SUMMARY, submitted_payload
from .prompts import COOPERATIVE_PROMPT, build_forced_prompt


@dataclass(frozen=True, slots=True)
class GenerationPolicy:
    """Stop condition, capability constraint and prompt for one attempt."""

    name: str
    max_steps: int
    forced_capability: str | None = None
    stop_capability: str = SUBMIT_SUMMARY
    stop_on_valid_only: bool = False

    def should_stop(self, step: SessionStep) -> bool:
        """Return ``True`` once ``step`` invoked the stop capability.

        With ``stop_on_valid_only`` the call must also carry a summary that
        validates, so a malformed submission leaves the step budget running.
        """
        return any(
            call.name == self.stop_capability
            and (not self.stop_on_valid_only or _is_valid_submission(call))
            for call in step.calls
        )

    def user_prompt(self, cached_emails: Sequence[EmailMessage] | None) -> str:
        """Return the user message opening the session."""
        if self.forced_capability is None:
            return COOPERATIVE_PROMPT
        return build_forced_prompt(cached_emails)


def cooperative_policy(max_steps: int = 10) -> GenerationPolicy:
    """Let the model explore freely until it submits."""
    return GenerationPolicy(name="cooperative", max_steps=max_steps)


def forced_policy(max_steps: int = 5) -> GenerationPolicy:
    """Restrict the model to ``submitSummary`` within a step budget."""
    return GenerationPolicy(
        name="forced",
        max_steps=max_steps,
        forced_capability=SUBMIT_SUMMARY,
        stop_on_valid_only=True,
    )


def _is_valid_submission(call: CapabilityCall) -> bool:
    try:
        CallSummary.model_validate(submitted_payload(call.arguments))
    except ValidationError:
        return False
    return True


def policy_for_attempt(attempt: int, settings: SummarizerSettings) -> GenerationPolicy:
    """Select the policy for a 1-based ``attempt`` number."""
    if attempt <= 1:
        return cooperative_policy(settings.cooperative_max_steps)
    return forced_policy(settings.forced_max_steps)


__all__ = [
    "GenerationPolicy",
    "cooperative_policy",
    "forced_policy",
    "policy_for_attempt",
]
