from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence, Union

from integration.deep_links import DEFAULT_RECEIVER, payment_link
from momentum.config import Settings
from momentum.models import (
    TASK_PRIORITY_LEVELS,
    Action,
    CalendarAction,
    Entity,
    IntentResult,
    NotificationAction,
    PaymentAction,
    ShoppingAction,
    TaskAction,
)
from scheduling.temporal_reasoner import TemporalReasoner, detect_urgency, parse_entity_datetime

logger = logging.getLogger(__name__)

DEFAULT_EVENT_DURATION = timedelta(hours=1)

# How long a social event usually blocks the calendar.
SOCIAL_EVENT_DURATIONS: Dict[str, timedelta] = {
    "wedding": timedelta(hours=2),
    "funeral": timedelta(hours=2),
    "first_birthday": timedelta(hours=2),
    "sixtieth_birthday": timedelta(hours=3),
    "birthday": timedelta(hours=3),
    "graduation": timedelta(hours=2),
}

GIFT_MEMOS: Dict[str, str] = {
    "wedding": "결혼 축하드립니다",
    "funeral": "삼가 고인의 명복을 빕니다",
    "first_birthday": "돌 축하드립니다",
    "sixtieth_birthday": "환갑 축하드립니다",
    "birthday": "생일 축하합니다",
    "graduation": "졸업 축하합니다",
}

PRODUCT_NAME_LIMIT = 40


def _first(entities: Sequence[Entity], entity_type: str) -> Optional[Entity]:
    for entity in entities:
        if entity.type == entity_type:
            return entity
    return None


def _recipient(entities: Sequence[Entity]) -> str:
    for entity in entities:
        if entity.type == "person" and entity.metadata.get("kind") == "name":
            return entity.value
    return DEFAULT_RECEIVER


class ActionSuggester:
    """Maps a classified intent and its entities to pending action proposals.

    Intents whose required entity is missing produce nothing; an urgent
    notification is appended whenever the text is urgent enough.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        reasoner: Optional[TemporalReasoner] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings or Settings()
        self.clock = clock
        self.reasoner = reasoner or TemporalReasoner(clock=clock)

    def suggest(
        self,
        intent: Union[IntentResult, str],
        entities: Sequence[Entity],
        raw_text: str = "",
        context_id: Optional[str] = None,
    ) -> List[Action]:
        if isinstance(intent, str):
            intent = IntentResult(intent=intent)
        entities = list(entities)

        builders = {
            "calendar": self._calendar,
            "shopping": self._shopping,
            "work": self._work,
            "social": self._social,
            "payment": self._payment,
        }
        actions: List[Action] = []
        builder = builders.get(intent.intent)
        if builder is not None:
            actions.extend(builder(intent, entities, raw_text))

        urgency = detect_urgency(raw_text)
        if urgency >= self.settings.urgent_notification_threshold:
            actions.append(self._urgent_notification(urgency, raw_text))

        for action in actions:
            action.source_context_id = context_id
        return actions

    # ------------------------------------------------------------ per intent

    def _calendar(self, intent: IntentResult, entities: List[Entity], raw_text: str) -> List[Action]:
        date_entity = _first(entities, "date")
        start = parse_entity_datetime(date_entity.value) if date_entity else None
        if start is None:
            logger.debug("Calendar intent without a usable date entity; no action suggested")
            return []

        location = _first(entities, "location")
        return [
            CalendarAction(
                title="일정 등록",
                description="캘린더에 일정을 등록합니다",
                entities=[e for e in (date_entity, location) if e is not None],
                start_time=start,
                end_time=start + DEFAULT_EVENT_DURATION,
                location=location.value if location else None,
                scheduled_for=start,
                tags=["calendar"],
            )
        ]

    def _shopping(self, intent: IntentResult, entities: List[Entity], raw_text: str) -> List[Action]:
        amount = _first(entities, "amount")
        price = float(amount.value) if amount else 0.0
        currency = amount.currency if amount else self.settings.default_currency
        product_name = " ".join(raw_text.split())[:PRODUCT_NAME_LIMIT] or "상품"

        actions: List[Action] = [
            ShoppingAction(
                title="위시리스트 추가",
                description="쇼핑 위시리스트에 추가합니다",
                entities=[e for e in entities if e.type == "amount"],
                product_name=product_name,
                price=price,
                currency=currency,
                tags=["shopping"],
            )
        ]
        if amount is not None:
            actions.append(
                NotificationAction(
                    title="가격 알림 설정",
                    description="가격 하락 시 알림을 받습니다",
                    entities=[amount],
                    notification_title="가격 알림",
                    notification_body=f"{product_name} 가격이 {amount.raw_text} 아래로 내려가면 알려드립니다",
                    tags=["shopping", "price-alert"],
                )
            )
        return actions

    def _work(self, intent: IntentResult, entities: List[Entity], raw_text: str) -> List[Action]:
        date_entity = _first(entities, "date")
        deadline = parse_entity_datetime(date_entity.value) if date_entity else None
        if deadline is None:
            logger.debug("Work intent without a deadline; no task suggested")
            return []

        label = self.reasoner.task_priority(deadline)
        return [
            TaskAction(
                title="업무 등록",
                description="업무 관리 도구에 할 일을 등록합니다",
                entities=[date_entity],
                deadline=deadline,
                priority=TASK_PRIORITY_LEVELS[label],
                scheduled_for=self.reasoner.optimal_reminder(deadline),
                tags=["work", label],
            )
        ]

    def _social(self, intent: IntentResult, entities: List[Entity], raw_text: str) -> List[Action]:
        event_type = intent.event_type or "etc"
        actions: List[Action] = []

        date_entity = _first(entities, "date")
        start = parse_entity_datetime(date_entity.value) if date_entity else None
        location = _first(entities, "location")
        if start is not None:
            actions.append(
                CalendarAction(
                    title="경조사 일정 등록",
                    description="캘린더에 경조사 일정을 등록합니다",
                    entities=[e for e in (date_entity, location) if e is not None],
                    start_time=start,
                    end_time=start + SOCIAL_EVENT_DURATIONS.get(event_type, DEFAULT_EVENT_DURATION),
                    location=location.value if location else None,
                    reminder_minutes=24 * 60,
                    scheduled_for=start,
                    tags=["social", event_type],
                )
            )
        else:
            logger.debug("Social intent without a date entity; no calendar action suggested")

        amount = _first(entities, "amount")
        if amount is not None:
            recipient = _recipient(entities)
            memo = GIFT_MEMOS.get(event_type, "")
            actions.append(
                PaymentAction(
                    title="축의금 송금 준비",
                    description="송금 앱을 실행하고 금액을 입력합니다",
                    entities=[amount],
                    recipient=recipient,
                    amount=float(amount.value),
                    currency=amount.currency,
                    memo=memo or None,
                    deep_link=payment_link(
                        self.settings.payment_provider, recipient, float(amount.value), memo
                    ),
                    tags=["social", event_type],
                )
            )
        return actions

    def _payment(self, intent: IntentResult, entities: List[Entity], raw_text: str) -> List[Action]:
        amount = _first(entities, "amount")
        if amount is None:
            logger.debug("Payment intent without an amount; no payment suggested")
            return []

        person = next((e for e in entities if e.type == "person"), None)
        recipient = _recipient(entities)
        return [
            PaymentAction(
                title="송금 실행",
                description="송금 앱을 실행하고 금액을 입력합니다",
                entities=[e for e in (amount, person) if e is not None],
                recipient=recipient,
                amount=float(amount.value),
                currency=amount.currency,
                deep_link=payment_link(self.settings.payment_provider, recipient, float(amount.value)),
                tags=["payment"],
            )
        ]

    def _urgent_notification(self, urgency: int, raw_text: str) -> NotificationAction:
        return NotificationAction(
            title="긴급 알림",
            description="즉시 확인이 필요한 알림을 설정합니다",
            notification_title="긴급 알림",
            notification_body=" ".join(raw_text.split())[:80],
            scheduled_time=self.clock(),
            delivery_priority="high",
            priority=5,
            tags=["urgent", f"urgency-{urgency}"],
        )
