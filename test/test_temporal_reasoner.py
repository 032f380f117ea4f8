from datetime import datetime, timedelta

import pytest

from momentum.models import DateEntity, LocationEntity
from scheduling.temporal_reasoner import TemporalReasoner, detect_urgency
from conftest import FIXED_NOW


@pytest.fixture
def reasoner(fixed_clock):
    return TemporalReasoner(clock=fixed_clock)


def _date(value):
    return DateEntity(raw_text=value, value=value, confidence=0.9)


@pytest.mark.parametrize(
    "text,level",
    [
        ("어머니 장례식이 내일이야", 5),
        ("긴급! 서버 다운", 5),
        ("please reply asap", 5),
        ("오늘 저녁 약속", 4),
        ("내일 회의", 3),
        ("this is important", 3),
        ("이번 주 안에", 2),
        ("나중에 보자", 1),
        ("그냥 메모", 2),
        ("", 2),
    ],
)
def test_urgency_levels(text, level):
    assert detect_urgency(text) == level


def test_deadline_is_first_date_entity(reasoner):
    entities = [
        LocationEntity(raw_text="강남", value="강남", confidence=0.7),
        _date("2026-11-15"),
        _date("2026-12-01"),
    ]
    result = reasoner.analyze_temporal(entities, "")
    assert result.deadline == datetime(2026, 11, 15)


def test_no_date_means_no_deadline(reasoner):
    result = reasoner.analyze_temporal([], "나중에")
    assert result.deadline is None
    assert result.optimal_reminder is None
    assert result.urgency == 1


def test_reminder_tiers(reasoner):
    far = FIXED_NOW + timedelta(days=10)
    assert reasoner.optimal_reminder(far) == far - timedelta(days=3)

    mid = FIXED_NOW + timedelta(days=5)
    assert reasoner.optimal_reminder(mid) == mid - timedelta(days=1)

    near = FIXED_NOW + timedelta(days=1)
    assert reasoner.optimal_reminder(near) == FIXED_NOW


@pytest.mark.parametrize("days,priority", [(0, "high"), (2, "high"), (7, "medium"), (8, "low")])
def test_task_priority_boundaries(reasoner, days, priority):
    assert reasoner.task_priority(FIXED_NOW + timedelta(days=days)) == priority


def test_task_priority_uses_calendar_days(reasoner):
    # more than 2 days remain, but it is only two calendar days away
    deadline = datetime(2026, 10, 21, 23, 0)
    assert reasoner.task_priority(deadline) == "high"


def test_reminder_schedule():
    event = datetime(2026, 11, 15, 12, 0)
    assert TemporalReasoner.reminder_schedule(event) == [
        datetime(2026, 11, 8, 12, 0),
        datetime(2026, 11, 14, 12, 0),
        datetime(2026, 11, 15, 9, 0),
    ]
