from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

logger = logging.getLogger(__name__)

QUIET_HOURS_START = 21
QUIET_HOURS_END = 8


def is_quiet_hour(moment: datetime) -> bool:
    return moment.hour >= QUIET_HOURS_START or moment.hour < QUIET_HOURS_END


def next_allowed_time(moment: datetime) -> datetime:
    """Push a reminder that falls in quiet hours to 08:00."""
    if not is_quiet_hour(moment):
        return moment
    morning = moment.replace(hour=QUIET_HOURS_END, minute=0, second=0, microsecond=0)
    if moment.hour >= QUIET_HOURS_START:
        morning += timedelta(days=1)
    return morning


@dataclass
class DeliveredNotification:
    id: str
    title: str
    body: str
    scheduled_time: Optional[datetime]
    priority: str


class NotificationSink(ABC):
    @abstractmethod
    async def notify(
        self,
        title: str,
        body: str,
        *,
        scheduled_time: Optional[datetime] = None,
        priority: str = "default",
    ) -> str:
        """Deliver or schedule a notification and return its id."""
        raise NotImplementedError


class LoggingNotifier(NotificationSink):
    def __init__(self):
        self.sent: List[DeliveredNotification] = []

    async def notify(
        self,
        title: str,
        body: str,
        *,
        scheduled_time: Optional[datetime] = None,
        priority: str = "default",
    ) -> str:
        # high priority notifications ignore quiet hours
        if scheduled_time is not None and priority != "high":
            scheduled_time = next_allowed_time(scheduled_time)

        notification_id = f"notification_{uuid.uuid4().hex[:12]}"
        self.sent.append(
            DeliveredNotification(
                id=notification_id,
                title=title,
                body=body,
                scheduled_time=scheduled_time,
                priority=priority,
            )
        )
        when = scheduled_time.isoformat() if scheduled_time else "now"
        logger.info(f"Notification [{priority}] scheduled for {when}: {title}")
        return notification_id
