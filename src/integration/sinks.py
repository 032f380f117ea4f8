from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class TaskRecord:
    id: str
    title: str
    deadline: datetime
    priority: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    parent_task_id: Optional[str] = None


@dataclass
class WishlistItem:
    id: str
    product_name: str
    price: float
    currency: str
    product_url: Optional[str] = None
    target_price: Optional[float] = None


class TaskSink:
    """In-memory task list."""

    def __init__(self):
        self.tasks: Dict[str, TaskRecord] = {}

    async def create_task(
        self,
        title: str,
        deadline: datetime,
        *,
        priority: str = "medium",
        description: str = "",
        tags: Optional[List[str]] = None,
        parent_task_id: Optional[str] = None,
    ) -> str:
        task_id = uuid.uuid4().hex
        self.tasks[task_id] = TaskRecord(
            id=task_id,
            title=title,
            deadline=deadline,
            priority=priority,
            description=description,
            tags=list(tags or []),
            parent_task_id=parent_task_id,
        )
        logger.info(f"Task {task_id} created ({priority}): {title}")
        return task_id


class WishlistSink:
    """In-memory shopping wishlist."""

    def __init__(self):
        self.items: Dict[str, WishlistItem] = {}

    async def add(
        self,
        product_name: str,
        price: float,
        currency: str = "KRW",
        *,
        product_url: Optional[str] = None,
        target_price: Optional[float] = None,
    ) -> str:
        item_id = uuid.uuid4().hex
        self.items[item_id] = WishlistItem(
            id=item_id,
            product_name=product_name,
            price=price,
            currency=currency,
            product_url=product_url,
            target_price=target_price,
        )
        logger.info(f"Wishlist item {item_id} added: {product_name} ({price} {currency})")
        return item_id
