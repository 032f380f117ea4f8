from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

from execution.errors import DispatchError
from integration.calendar_integration import CalendarIntegration
from integration.deep_links import DeepLinkLauncher, RecordingLauncher, communication_url, map_url
from integration.notifications import LoggingNotifier, NotificationSink
from integration.sinks import TaskSink, WishlistSink
from scheduling.temporal_reasoner import TemporalReasoner, parse_entity_datetime

logger = logging.getLogger(__name__)

DEFAULT_TASK_HORIZON = timedelta(days=7)

Handler = Callable[[Any], Awaitable[Dict[str, Any]]]


class ActionHandlers:
    """Per-category dispatch onto the integration collaborators.

    Each handler resolves the entities it needs from the action, fails fast
    with DispatchError when they are missing, and returns result data.
    """

    def __init__(
        self,
        calendar: Optional[CalendarIntegration] = None,
        notifier: Optional[NotificationSink] = None,
        launcher: Optional[DeepLinkLauncher] = None,
        tasks: Optional[TaskSink] = None,
        wishlist: Optional[WishlistSink] = None,
        reasoner: Optional[TemporalReasoner] = None,
    ):
        self.calendar = calendar or CalendarIntegration()
        self.notifier = notifier or LoggingNotifier()
        self.launcher = launcher or RecordingLauncher()
        self.tasks = tasks or TaskSink()
        self.wishlist = wishlist or WishlistSink()
        self.reasoner = reasoner or TemporalReasoner()

        self._handlers: Dict[str, Handler] = {
            "calendar": self.handle_calendar,
            "payment": self.handle_payment,
            "shopping": self.handle_shopping,
            "task": self.handle_task,
            "navigation": self.handle_navigation,
            "communication": self.handle_communication,
            "notification": self.handle_notification,
        }

    def supports(self, category: str) -> bool:
        return category in self._handlers

    async def dispatch(self, action) -> Dict[str, Any]:
        category = getattr(action, "category", None)
        handler = self._handlers.get(category)
        if handler is None:
            raise DispatchError(f"Unknown action type: {category}")
        return await handler(action)

    async def _open(self, url: str) -> None:
        if not await self.launcher.can_open(url):
            raise DispatchError(f"Cannot open URL: {url}")
        await self.launcher.open(url)

    # ------------------------------------------------------------ handlers

    async def handle_calendar(self, action) -> Dict[str, Any]:
        date_entity = action.find_entity("date")
        start = parse_entity_datetime(date_entity.value) if date_entity else None
        if start is None:
            raise DispatchError("Date entity required for calendar action")

        duration = action.end_time - action.start_time
        if duration <= timedelta(0):
            duration = timedelta(hours=1)
        location_entity = action.find_entity("location")
        location = action.location or (location_entity.value if location_entity else None)

        event_id = await self.calendar.create_event(
            action.title,
            start,
            start + duration,
            location=location,
            attendees=action.attendees,
            reminder_minutes=action.reminder_minutes,
            description=action.description,
        )
        return {"event_id": event_id, "message": "Calendar event created successfully"}

    async def handle_payment(self, action) -> Dict[str, Any]:
        amount_entity = action.find_entity("amount")
        if amount_entity is None or not amount_entity.value:
            raise DispatchError("Amount entity required for payment action")

        person = action.find_entity("person")
        recipient = action.recipient or (person.value if person else "Unknown")
        opened = False
        if action.deep_link:
            if await self.launcher.can_open(action.deep_link):
                await self.launcher.open(action.deep_link)
                opened = True
            else:
                logger.warning(f"Payment deep link not supported: {action.deep_link}")

        return {
            "message": "Payment app opened" if opened else "Payment prepared",
            "recipient": recipient,
            "amount": float(amount_entity.value),
            "currency": amount_entity.currency,
            "deep_link": action.deep_link,
        }

    async def handle_shopping(self, action) -> Dict[str, Any]:
        item_id = await self.wishlist.add(
            action.product_name,
            action.price,
            action.currency,
            product_url=action.product_url,
            target_price=action.target_price,
        )
        if action.product_url:
            await self._open(action.product_url)
        return {
            "message": "Product added to wishlist",
            "item_id": item_id,
            "product_name": action.product_name,
            "price": action.price,
            "currency": action.currency,
        }

    async def handle_task(self, action) -> Dict[str, Any]:
        date_entity = action.find_entity("date")
        deadline = parse_entity_datetime(date_entity.value) if date_entity else None
        if deadline is None:
            deadline = action.deadline or (self.reasoner.clock() + DEFAULT_TASK_HORIZON)

        priority = self.reasoner.task_priority(deadline)
        task_id = await self.tasks.create_task(
            action.title,
            deadline,
            priority=priority,
            description=action.description,
            tags=action.tags,
            parent_task_id=action.parent_task_id,
        )
        return {"message": "Task created successfully", "task_id": task_id, "priority": priority}

    async def handle_navigation(self, action) -> Dict[str, Any]:
        location = action.find_entity("location")
        destination = (location.value if location else None) or action.destination
        latitude = action.latitude if action.latitude is not None else getattr(location, "latitude", None)
        longitude = action.longitude if action.longitude is not None else getattr(location, "longitude", None)

        url = map_url(destination, latitude, longitude, action.transport_mode)
        await self._open(url)
        return {"message": "Navigation opened", "destination": destination, "url": url}

    async def handle_communication(self, action) -> Dict[str, Any]:
        person = action.find_entity("person")
        if person is None:
            raise DispatchError("Person entity required for communication action")

        if action.comm_type == "email":
            recipient = person.email or action.recipient
        elif action.comm_type in {"sms", "call"}:
            recipient = person.phone or action.recipient
        else:
            recipient = action.recipient

        try:
            url = communication_url(recipient, action.comm_type, action.message_template)
        except ValueError as e:
            raise DispatchError(str(e)) from e
        await self._open(url)
        return {"message": f"{action.comm_type} initiated", "recipient": recipient, "url": url}

    async def handle_notification(self, action) -> Dict[str, Any]:
        notification_id = await self.notifier.notify(
            action.notification_title,
            action.notification_body,
            scheduled_time=action.scheduled_time,
            priority=action.delivery_priority,
        )
        return {"message": "Notification scheduled", "notification_id": notification_id}
