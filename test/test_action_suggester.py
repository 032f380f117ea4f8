from datetime import datetime, timedelta

import pytest

from extraction.entity_extractor import EntityExtractor
from momentum.config import Settings
from momentum.models import (
    CalendarAction,
    IntentResult,
    NotificationAction,
    PaymentAction,
    ShoppingAction,
    TaskAction,
)
from suggestion.action_suggester import ActionSuggester


@pytest.fixture
def extractor(fixed_clock):
    return EntityExtractor(clock=fixed_clock)


@pytest.fixture
def suggester(fixed_clock):
    return ActionSuggester(clock=fixed_clock)


def _suggest(suggester, extractor, intent, text, **kw):
    if isinstance(intent, str):
        intent = IntentResult(intent=intent, confidence=0.8)
    return suggester.suggest(intent, extractor.extract(text), text, **kw)


def test_social_wedding_next_month(suggester, extractor):
    intent = IntentResult(intent="social", confidence=0.7, event_type="wedding")
    actions = _suggest(suggester, extractor, intent, "다음 달 15일 결혼식이야", context_id="ctx-1")

    assert len(actions) == 1
    action = actions[0]
    assert isinstance(action, CalendarAction)
    assert action.status == "pending"
    assert action.start_time == datetime(2026, 11, 15)
    assert action.end_time - action.start_time == timedelta(hours=2)
    assert action.source_context_id == "ctx-1"


def test_social_with_amount_prepares_payment(suggester, extractor):
    intent = IntentResult(intent="social", confidence=0.8, event_type="wedding")
    actions = _suggest(suggester, extractor, intent, "김민수 결혼식 12월 5일 강남 웨딩홀, 축의금 10만 원")

    calendar = [a for a in actions if isinstance(a, CalendarAction)]
    payments = [a for a in actions if isinstance(a, PaymentAction)]
    assert calendar and calendar[0].location in {"강남", "웨딩홀"}
    assert len(payments) == 1
    assert payments[0].amount == 100000
    assert payments[0].recipient == "김민수"
    assert payments[0].deep_link.startswith("https://kakaopay.kakao.com/pay?")


def test_payment_provider_setting_changes_link(fixed_clock, extractor):
    suggester = ActionSuggester(settings=Settings(payment_provider="toss"), clock=fixed_clock)
    actions = _suggest(suggester, extractor, "payment", "5만원 송금해줘")
    assert actions[0].deep_link.startswith("https://supertoss.co.kr/transfer?")


def test_calendar_without_date_is_suppressed(suggester, extractor):
    assert _suggest(suggester, extractor, "calendar", "회의 잡아야 함") == []


def test_calendar_with_date(suggester, extractor):
    actions = _suggest(suggester, extractor, "calendar", "내일 오후 2시 회의")
    assert len(actions) == 1
    assert actions[0].start_time == datetime(2026, 10, 20, 14, 0)
    assert actions[0].end_time == datetime(2026, 10, 20, 15, 0)


def test_shopping_with_price_adds_alert(suggester, extractor):
    actions = _suggest(suggester, extractor, "shopping", "운동화 할인 89,000원")
    assert isinstance(actions[0], ShoppingAction)
    assert actions[0].price == 89000
    assert isinstance(actions[1], NotificationAction)


def test_shopping_without_price(suggester, extractor):
    actions = _suggest(suggester, extractor, "shopping", "운동화 사고 싶다")
    assert len(actions) == 1
    assert actions[0].price == 0


def test_work_priority_from_deadline(suggester, extractor):
    actions = _suggest(suggester, extractor, "work", "보고서 마감 모레")
    assert isinstance(actions[0], TaskAction)
    assert actions[0].priority == 4
    assert "high" in actions[0].tags

    later = _suggest(suggester, extractor, "work", "보고서 마감 12월 25일")
    assert later[0].priority == 2


def test_payment_recipient_ignores_common_words(suggester, extractor):
    actions = _suggest(suggester, extractor, "payment", "이번에 5만원 송금해줘")
    payments = [a for a in actions if isinstance(a, PaymentAction)]
    assert len(payments) == 1
    assert payments[0].amount == 50000
    assert payments[0].recipient == "받는 분"


def test_payment_without_amount_is_suppressed(suggester, extractor):
    assert _suggest(suggester, extractor, "payment", "송금해줘") == []


def test_urgent_notification_is_appended(suggester, extractor):
    intent = IntentResult(intent="social", confidence=0.6, event_type="funeral")
    actions = _suggest(suggester, extractor, intent, "어머니 장례식이 내일이야")

    urgent = [a for a in actions if isinstance(a, NotificationAction)]
    assert len(urgent) == 1
    assert urgent[0].priority == 5
    assert urgent[0].delivery_priority == "high"
    assert any(isinstance(a, CalendarAction) for a in actions)


def test_urgency_threshold_is_configurable(fixed_clock, extractor):
    suggester = ActionSuggester(settings=Settings(urgent_notification_threshold=5), clock=fixed_clock)
    actions = _suggest(suggester, extractor, "other", "오늘 저녁")
    assert actions == []


def test_other_intent_without_urgency(suggester, extractor):
    assert _suggest(suggester, extractor, "other", "그냥 메모") == []
