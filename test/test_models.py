from datetime import datetime

import pytest
from pydantic import TypeAdapter, ValidationError

from momentum.models import (
    Action,
    AmountEntity,
    AnalysisResult,
    CalendarAction,
    DateEntity,
    Entity,
    IntentResult,
    InvalidTransitionError,
    NotificationAction,
    TemporalAnalysis,
)


def test_entity_confidence_must_be_in_range():
    with pytest.raises(ValidationError):
        DateEntity(raw_text="내일", value="2026-10-20", confidence=1.5)
    with pytest.raises(ValidationError):
        AmountEntity(raw_text="5만원", value="50000", confidence=-0.1)


def test_entity_union_discriminates_on_type():
    adapter = TypeAdapter(Entity)
    e = adapter.validate_python(
        {"type": "amount", "raw_text": "5만원", "value": "50000", "confidence": 0.9}
    )
    assert isinstance(e, AmountEntity)
    assert e.currency == "KRW"


def test_intent_result_defaults():
    r = IntentResult()
    assert r.intent == "other"
    assert r.confidence == 0.0
    assert r.source == "fallback"


def test_temporal_urgency_bounds():
    assert TemporalAnalysis().urgency == 2
    with pytest.raises(ValidationError):
        TemporalAnalysis(urgency=6)


def test_action_categories_do_not_leak_fields():
    with pytest.raises(ValidationError):
        CalendarAction(
            title="X",
            start_time=datetime(2026, 1, 1, 9),
            end_time=datetime(2026, 1, 1, 10),
            amount=1000,
        )


def test_action_union_discriminates_on_category():
    adapter = TypeAdapter(Action)
    a = adapter.validate_python(
        {
            "category": "notification",
            "title": "Ping",
            "notification_title": "Ping",
            "notification_body": "body",
        }
    )
    assert isinstance(a, NotificationAction)
    assert a.status == "pending"


@pytest.mark.parametrize(
    "priority,label", [(5, "urgent"), (4, "high"), (3, "medium"), (2, "low"), (1, "low")]
)
def test_priority_label(priority, label):
    a = NotificationAction(
        title="t", notification_title="t", notification_body="b", priority=priority
    )
    assert a.priority_label == label


def test_status_moves_forward_only():
    a = NotificationAction(title="t", notification_title="t", notification_body="b")
    a.advance_status("ready")
    a.advance_status("executed")
    with pytest.raises(InvalidTransitionError):
        a.advance_status("ready")


def test_pending_can_be_cancelled_but_not_executed_directly():
    a = NotificationAction(title="t", notification_title="t", notification_body="b")
    with pytest.raises(InvalidTransitionError):
        a.advance_status("executed")
    a.advance_status("cancelled")
    assert a.status == "cancelled"


def test_analysis_result_blank_error_is_dropped():
    r = AnalysisResult(context_id="c1", error="   ")
    assert r.error is None
    assert r.success is True
