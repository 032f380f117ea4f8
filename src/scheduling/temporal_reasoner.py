from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from momentum.models import Entity, TaskPriority, TemporalAnalysis

logger = logging.getLogger(__name__)

# Scanned from most to least urgent; the first level with a hit wins.
URGENCY_KEYWORDS: List[Tuple[int, List[str]]] = [
    (5, ["urgent", "emergency", "asap", "immediately", "긴급", "즉시", "당장",
         "장례", "부고", "별세", "funeral"]),
    (4, ["today", "tonight", "오늘"]),
    (3, ["tomorrow", "important", "내일", "중요"]),
    (2, ["this week", "이번 주", "이번주"]),
    (1, ["later", "나중에"]),
]

DEFAULT_URGENCY = 2


def detect_urgency(text: Optional[str]) -> int:
    lowered = (text or "").lower()
    for level, keywords in URGENCY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return level
    return DEFAULT_URGENCY


def parse_entity_datetime(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


class TemporalReasoner:
    """Deadline, urgency and reminder timing for an analysed snippet."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self.clock = clock

    def analyze_temporal(self, entities: Sequence[Entity], raw_text: str = "") -> TemporalAnalysis:
        deadline = self.find_deadline(entities)
        return TemporalAnalysis(
            deadline=deadline,
            urgency=detect_urgency(raw_text),
            optimal_reminder=self.optimal_reminder(deadline) if deadline else None,
        )

    def find_deadline(self, entities: Sequence[Entity]) -> Optional[datetime]:
        for entity in entities:
            if entity.type != "date":
                continue
            parsed = parse_entity_datetime(entity.value)
            if parsed is None:
                logger.debug(f"Ignoring unparseable date entity value {entity.value!r}")
                continue
            return parsed
        return None

    def optimal_reminder(self, deadline: datetime) -> datetime:
        now = self.clock()
        remaining = deadline - now
        if remaining > timedelta(days=7):
            return deadline - timedelta(days=3)
        if remaining > timedelta(days=2):
            return deadline - timedelta(days=1)
        return now

    def task_priority(self, deadline: Optional[datetime]) -> TaskPriority:
        """high within 2 calendar days, medium within a week, otherwise low."""
        if deadline is None:
            return "medium"
        days = (deadline.date() - self.clock().date()).days
        if days <= 2:
            return "high"
        if days <= 7:
            return "medium"
        return "low"

    @staticmethod
    def reminder_schedule(event_at: datetime) -> List[datetime]:
        """D-7, D-1 and 09:00 on the day of the event."""
        return [
            event_at - timedelta(days=7),
            event_at - timedelta(days=1),
            event_at.replace(hour=9, minute=0, second=0, microsecond=0),
        ]
