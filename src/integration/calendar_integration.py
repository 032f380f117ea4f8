from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class CalendarEvent:
    id: str
    title: str
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    attendees: List[str] = field(default_factory=list)
    reminder_minutes: Optional[int] = None
    description: str = ""


class CalendarIntegration:
    """In-memory event book standing in for the device calendar."""

    def __init__(self):
        self.events: Dict[str, CalendarEvent] = {}

    async def create_event(
        self,
        title: str,
        start_time: datetime,
        end_time: datetime,
        *,
        location: Optional[str] = None,
        attendees: Optional[List[str]] = None,
        reminder_minutes: Optional[int] = None,
        description: str = "",
    ) -> str:
        if end_time < start_time:
            raise ValueError("Event end time is before its start time")

        event_id = f"event_{uuid.uuid4().hex[:12]}"
        self.events[event_id] = CalendarEvent(
            id=event_id,
            title=title,
            start_time=start_time,
            end_time=end_time,
            location=location,
            attendees=list(attendees or []),
            reminder_minutes=reminder_minutes,
            description=description,
        )
        logger.info(f"Calendar event {event_id} created: {title} at {start_time.isoformat()}")
        return event_id

    def list_events(self) -> List[CalendarEvent]:
        return sorted(self.events.values(), key=lambda e: e.start_time)
