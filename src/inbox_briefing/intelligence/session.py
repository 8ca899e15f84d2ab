"""Drive one tool-calling generation round against a backend."""

from __future__ import annotations

import logging

from inbox_briefing.core.interfaces import GenerativeBackend, SessionObserver
from inbox_briefing.core.models import (
    CapabilityResult,
    EmailMessage,
    ModelRequest,
    ModelTurn,
    SessionStep,
    StepTrace,
)

from .capabilities import SummaryCapabilities
from .policy import GenerationPolicy

LOGGER = logging.getLogger(__name__)


async def run_session(
    backend: GenerativeBackend,
    policy: GenerationPolicy,
    capabilities: SummaryCapabilities,
    *,
    system_prompt: str,
    observer: SessionObserver,
    attempt: int = 1,
    cached_emails: tuple[EmailMessage, ...] | None = None,
) -> StepTrace:
    """Run the model until ``policy`` says stop and return the step trace.

    A session ends when a step invokes the policy's stop capability, when the
    model answers without calling anything, or after ``policy.max_steps``.
    """
    user_prompt = policy.user_prompt(cached_emails)
    exchanges: list[tuple[ModelTurn, tuple[CapabilityResult, ...]]] = []
    steps: list[SessionStep] = []

    for index in range(1, policy.max_steps + 1):
        request = ModelRequest(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            capabilities=capabilities.declarations,
            exchanges=tuple(exchanges),
            forced_capability=policy.forced_capability,
        )
        turn = await backend.complete(request)
        step = SessionStep(index=index, text=turn.text, calls=turn.calls)
        steps.append(step)
        observer.on_step(attempt, step)

        if not turn.calls:
            LOGGER.debug("Model answered without capability calls at step %d", index)
            break

        results = []
        for call in turn.calls:
            observer.on_capability_call(attempt, call)
            response = await capabilities.invoke(call)
            results.append(CapabilityResult(call=call, response=response))

        if policy.should_stop(step):
            break
        exchanges.append((turn, tuple(results)))
    else:
        LOGGER.warning(
            "%s session hit its %d step limit", policy.name, policy.max_steps
        )

    return tuple(steps)


__all__ = ["run_session"]
