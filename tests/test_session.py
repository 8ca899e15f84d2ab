"""Tests for the generation session driver and email cache."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from inbox_briefing.core.interfaces import SourceUnavailable
from inbox_briefing.core.models import (
    CapabilityCall,
    EmailMessage,
    ModelRequest,
    ModelTurn,
    SessionStep,
)
from inbox_briefing.intelligence.capabilities import (
    GET_UNREAD_EMAILS,
    SUBMIT_SUMMARY,
    EmailCache,
    SummaryCapabilities,
)
from inbox_briefing.intelligence.policy import cooperative_policy, forced_policy
from inbox_briefing.intelligence.session import run_session


class StubSource:
    """Email source returning a fixed list and counting fetches."""

    def __init__(
        self, emails: Sequence[EmailMessage], *, fail_first: bool = False
    ) -> None:
        self.emails = list(emails)
        self.fail_first = fail_first
        self.calls = 0

    async def fetch(self, query: str, max_results: int) -> Sequence[EmailMessage]:
        self.calls += 1
        if self.fail_first and self.calls == 1:
            raise SourceUnavailable("offline")
        return self.emails[:max_results]


class ScriptedModel:
    """Backend replaying scripted turns, then repeating ``fallback``."""

    def __init__(self, turns: Sequence[ModelTurn], fallback: ModelTurn) -> None:
        self._turns = list(turns)
        self._fallback = fallback
        self.requests: list[ModelRequest] = []

    @property
    def provider_id(self) -> str:
        return "scripted"

    async def complete(self, request: ModelRequest) -> ModelTurn:
        self.requests.append(request)
        if self._turns:
            return self._turns.pop(0)
        return self._fallback


class RecordingObserver:
    def __init__(self) -> None:
        self.events: list[tuple[object, ...]] = []

    def on_attempt_start(self, attempt: int, policy: str) -> None:
        self.events.append(("start", attempt, policy))

    def on_step(self, attempt: int, step: SessionStep) -> None:
        self.events.append(("step", attempt, step.index))

    def on_capability_call(self, attempt: int, call: CapabilityCall) -> None:
        self.events.append(("call", attempt, call.name))

    def on_attempt_end(self, attempt: int, submitted: bool) -> None:
        self.events.append(("end", attempt, submitted))


FETCH = ModelTurn(calls=(CapabilityCall(name=GET_UNREAD_EMAILS),))
SUBMIT = ModelTurn(
    calls=(CapabilityCall(name=SUBMIT_SUMMARY, arguments={"summary": {}}),)
)


def _emails(count: int) -> list[EmailMessage]:
    return [
        EmailMessage(
            id=f"m{index}",
            sender=f"sender{index}@example.com",
            subject=f"Subject {index}",
            date="Mon, 1 Jan 2024 09:00:00 +0000",
            snippet="snippet",
        )
        for index in range(count)
    ]


def _capabilities(source: StubSource) -> SummaryCapabilities:
    return SummaryCapabilities(EmailCache(source, query="is:unread", max_results=15))


@pytest.mark.asyncio
async def test_cooperative_session_stops_at_submission() -> None:
    model = ScriptedModel([FETCH, SUBMIT], fallback=FETCH)
    observer = RecordingObserver()

    trace = await run_session(
        model,
        cooperative_policy(),
        _capabilities(StubSource(_emails(2))),
        system_prompt="system",
        observer=observer,
    )

    assert [step.index for step in trace] == [1, 2]
    assert trace[1].calls[0].name == SUBMIT_SUMMARY
    assert len(model.requests) == 2
    assert all(request.forced_capability is None for request in model.requests)
    assert observer.events == [
        ("step", 1, 1),
        ("call", 1, GET_UNREAD_EMAILS),
        ("step", 1, 2),
        ("call", 1, SUBMIT_SUMMARY),
    ]


@pytest.mark.asyncio
async def test_session_replays_capability_results_to_model() -> None:
    model = ScriptedModel([FETCH, SUBMIT], fallback=FETCH)

    await run_session(
        model,
        cooperative_policy(),
        _capabilities(StubSource(_emails(2))),
        system_prompt="system",
        observer=RecordingObserver(),
    )

    second = model.requests[1]
    assert len(second.exchanges) == 1
    turn, results = second.exchanges[0]
    assert turn is FETCH
    assert [email["id"] for email in results[0].response["emails"]] == ["m0", "m1"]


@pytest.mark.asyncio
async def test_session_stops_when_model_answers_in_text() -> None:
    model = ScriptedModel([], fallback=ModelTurn(text="All done."))

    trace = await run_session(
        model,
        cooperative_policy(),
        _capabilities(StubSource([])),
        system_prompt="system",
        observer=RecordingObserver(),
    )

    assert len(trace) == 1
    assert trace[0].calls == ()


@pytest.mark.asyncio
async def test_forced_session_terminates_within_five_steps() -> None:
    source = StubSource(_emails(1))
    model = ScriptedModel([], fallback=FETCH)

    trace = await run_session(
        model,
        forced_policy(),
        _capabilities(source),
        system_prompt="system",
        observer=RecordingObserver(),
    )

    assert len(trace) == 5
    assert len(model.requests) == 5
    assert {request.forced_capability for request in model.requests} == {SUBMIT_SUMMARY}
    assert source.calls == 1


@pytest.mark.asyncio
async def test_forced_session_continues_after_malformed_submission() -> None:
    valid = {
        "unreadCount": 1,
        "headline": "One email",
        "important": [],
        "quickHits": [],
        "speakable": "You have one unread email.",
    }
    model = ScriptedModel(
        [
            SUBMIT,
            ModelTurn(
                calls=(
                    CapabilityCall(name=SUBMIT_SUMMARY, arguments={"summary": valid}),
                )
            ),
        ],
        fallback=SUBMIT,
    )

    trace = await run_session(
        model,
        forced_policy(),
        _capabilities(StubSource(_emails(1))),
        system_prompt="system",
        observer=RecordingObserver(),
    )

    assert len(trace) == 2
    assert not forced_policy().should_stop(trace[0])
    assert cooperative_policy().should_stop(trace[0])


@pytest.mark.asyncio
async def test_repeated_fetch_calls_hit_source_once() -> None:
    source = StubSource(_emails(3))
    double_fetch = ModelTurn(
        calls=(
            CapabilityCall(name=GET_UNREAD_EMAILS, call_id="a"),
            CapabilityCall(name=GET_UNREAD_EMAILS, call_id="b"),
        )
    )
    model = ScriptedModel([double_fetch, FETCH, SUBMIT], fallback=FETCH)

    await run_session(
        model,
        cooperative_policy(),
        _capabilities(source),
        system_prompt="system",
        observer=RecordingObserver(),
    )

    assert source.calls == 1


@pytest.mark.asyncio
async def test_unknown_capability_is_reported_to_model() -> None:
    capabilities = _capabilities(StubSource([]))

    response = await capabilities.invoke(CapabilityCall(name="deleteEverything"))

    assert "error" in response


@pytest.mark.asyncio
async def test_failed_fetch_is_not_cached() -> None:
    source = StubSource(_emails(2), fail_first=True)
    cache = EmailCache(source, query="is:unread", max_results=15)

    with pytest.raises(SourceUnavailable):
        await cache.get()
    assert cache.emails is None

    emails = await cache.get()
    assert len(emails) == 2
    assert source.calls == 2


def test_forced_policy_prompt_replays_cached_emails() -> None:
    policy = forced_policy()

    assert "submitSummary" in policy.user_prompt(None)
    assert "Subject 0" in policy.user_prompt(tuple(_emails(1)))
    assert cooperative_policy().user_prompt(tuple(_emails(1))) == (
        "Summarize my current inbox."
    )
