"""Tests for the structured summary contract."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from inbox_briefing.core.models import CallSummary, EmailMessage


def _important(index: int) -> dict[str, str]:
    return {
        "from": f"sender{index}@example.com",
        "subject": f"Subject {index}",
        "whyImportant": "Deadline today",
        "suggestedAction": "Reply before noon",
    }


def _payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "unreadCount": 2,
        "headline": "Two emails need a look",
        "important": [_important(1)],
        "quickHits": [
            {"from": "news@example.com", "subject": "Digest", "oneLine": "Weekly news"}
        ],
        "speakable": "You have two unread emails.",
    }
    payload.update(overrides)
    return payload


def test_call_summary_accepts_camel_case_payload() -> None:
    summary = CallSummary.model_validate(_payload())

    assert summary.unread_count == 2
    assert summary.important[0].why_important == "Deadline today"
    assert summary.quick_hits[0].one_line == "Weekly news"
    assert summary.to_payload() == _payload()


def test_call_summary_rejects_nine_important_entries() -> None:
    with pytest.raises(ValidationError):
        CallSummary.model_validate(
            _payload(important=[_important(index) for index in range(9)])
        )


def test_call_summary_allows_eight_important_entries() -> None:
    summary = CallSummary.model_validate(
        _payload(important=[_important(index) for index in range(8)])
    )
    assert len(summary.important) == 8


def test_call_summary_rejects_thirteen_quick_hits() -> None:
    hits = [{"from": "a", "subject": "b", "oneLine": "c"} for _ in range(13)]
    with pytest.raises(ValidationError):
        CallSummary.model_validate(_payload(quickHits=hits))


@pytest.mark.parametrize("count", [-1, "3", True, 2.5])
def test_call_summary_requires_non_negative_integer_count(count: object) -> None:
    with pytest.raises(ValidationError):
        CallSummary.model_validate(_payload(unreadCount=count))


def test_call_summary_requires_every_field() -> None:
    payload = _payload()
    del payload["quickHits"]
    with pytest.raises(ValidationError):
        CallSummary.model_validate(payload)


def test_email_message_payload_uses_from_key() -> None:
    message = EmailMessage(
        id="m1",
        sender="Ada <ada@example.com>",
        subject="Hello",
        date="Mon, 1 Jan 2024 09:00:00 +0000",
        snippet="Hi there",
    )
    assert message.to_payload()["from"] == "Ada <ada@example.com>"
