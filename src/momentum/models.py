from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def new_id() -> str:
    return uuid.uuid4().hex


SourceType = Literal["voice", "chat", "manual", "screenshot", "location"]

IntentLabel = Literal["calendar", "shopping", "work", "social", "payment", "other"]

SocialEventType = Literal[
    "wedding",
    "funeral",
    "first_birthday",
    "sixtieth_birthday",
    "birthday",
    "graduation",
    "etc",
]

ActionStatus = Literal["pending", "ready", "executed", "failed", "cancelled"]

ActionCategory = Literal[
    "calendar",
    "payment",
    "shopping",
    "task",
    "navigation",
    "communication",
    "notification",
]

ExecutionStage = Literal["preparing", "executing", "verifying", "completed", "failed"]

TaskPriority = Literal["low", "medium", "high"]

# Shared 1-5 priority used on actions for each task priority label.
TASK_PRIORITY_LEVELS: Dict[str, int] = {"low": 2, "medium": 3, "high": 4}


class RawInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = ""
    source: SourceType = "manual"
    id: str = Field(default_factory=new_id)
    captured_at: datetime = Field(default_factory=datetime.now)


# --------------------------------------------------------------------------
# Entities
# --------------------------------------------------------------------------


class _EntityBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=new_id)
    raw_text: str
    value: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DateEntity(_EntityBase):
    type: Literal["date"] = "date"


class TimeEntity(_EntityBase):
    type: Literal["time"] = "time"


class LocationEntity(_EntityBase):
    type: Literal["location"] = "location"
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class AmountEntity(_EntityBase):
    type: Literal["amount"] = "amount"
    currency: str = "KRW"


class PersonEntity(_EntityBase):
    type: Literal["person"] = "person"
    phone: Optional[str] = None
    email: Optional[str] = None
    relationship: Optional[str] = None


Entity = Annotated[
    Union[DateEntity, TimeEntity, LocationEntity, AmountEntity, PersonEntity],
    Field(discriminator="type"),
]

EntityType = Literal["date", "time", "location", "amount", "person"]


# --------------------------------------------------------------------------
# Intent / temporal
# --------------------------------------------------------------------------


class IntentAlternative(BaseModel):
    model_config = ConfigDict(frozen=True)

    intent: IntentLabel
    confidence: float = Field(..., ge=0.0, le=1.0)


class IntentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    intent: IntentLabel = "other"
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    alternatives: Optional[List[IntentAlternative]] = None
    source: Literal["model", "fallback"] = "fallback"
    event_type: Optional[SocialEventType] = None


class TemporalAnalysis(BaseModel):
    deadline: Optional[datetime] = None
    urgency: int = Field(2, ge=1, le=5)
    optimal_reminder: Optional[datetime] = None


# --------------------------------------------------------------------------
# Actions
# --------------------------------------------------------------------------


class InvalidTransitionError(ValueError):
    pass


# executed / failed / cancelled are terminal
_TRANSITIONS: Dict[str, set] = {
    "pending": {"ready", "failed", "cancelled"},
    "ready": {"executed", "failed", "cancelled"},
    "executed": set(),
    "failed": set(),
    "cancelled": set(),
}


class BaseAction(BaseModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    entities: List[Entity] = Field(default_factory=list)
    source_context_id: Optional[str] = None
    status: ActionStatus = "pending"
    priority: int = Field(3, ge=1, le=5)
    created_at: datetime = Field(default_factory=datetime.now)
    scheduled_for: Optional[datetime] = None
    executed_at: Optional[datetime] = None
    error: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @property
    def priority_label(self) -> str:
        if self.priority >= 5:
            return "urgent"
        if self.priority == 4:
            return "high"
        if self.priority == 3:
            return "medium"
        return "low"

    def find_entity(self, entity_type: str):
        for entity in self.entities:
            if entity.type == entity_type:
                return entity
        return None

    def advance_status(self, new_status: str) -> None:
        if new_status == self.status:
            return
        if new_status not in _TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Cannot move action {self.id} from {self.status} to {new_status}"
            )
        self.status = new_status


class CalendarAction(BaseAction):
    category: Literal["calendar"] = "calendar"
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    attendees: List[str] = Field(default_factory=list)
    reminder_minutes: Optional[int] = Field(default=None, ge=0)


class PaymentAction(BaseAction):
    category: Literal["payment"] = "payment"
    recipient: str
    amount: float = Field(..., ge=0)
    currency: str = "KRW"
    memo: Optional[str] = None
    deep_link: Optional[str] = None


class ShoppingAction(BaseAction):
    category: Literal["shopping"] = "shopping"
    product_name: str
    price: float = Field(0, ge=0)
    currency: str = "KRW"
    product_url: Optional[str] = None
    target_price: Optional[float] = Field(default=None, ge=0)


class TaskAction(BaseAction):
    category: Literal["task"] = "task"
    deadline: datetime
    parent_task_id: Optional[str] = None


class NavigationAction(BaseAction):
    category: Literal["navigation"] = "navigation"
    destination: str
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    transport_mode: Literal["driving", "walking", "transit", "cycling"] = "driving"


class CommunicationAction(BaseAction):
    category: Literal["communication"] = "communication"
    recipient: str
    comm_type: Literal["email", "sms", "chat", "call"] = "email"
    message_template: Optional[str] = None
    scheduled_time: Optional[datetime] = None


class NotificationAction(BaseAction):
    category: Literal["notification"] = "notification"
    notification_title: str
    notification_body: str
    scheduled_time: Optional[datetime] = None
    delivery_priority: Literal["low", "default", "high"] = "default"


Action = Annotated[
    Union[
        CalendarAction,
        PaymentAction,
        ShoppingAction,
        TaskAction,
        NavigationAction,
        CommunicationAction,
        NotificationAction,
    ],
    Field(discriminator="category"),
]


class ExecutionStatus(BaseModel):
    action_id: str
    stage: ExecutionStage
    progress: int = Field(0, ge=0, le=100)
    message: Optional[str] = None


class ActionResult(BaseModel):
    action_id: str
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class AnalysisResult(BaseModel):
    context_id: str
    source: SourceType = "manual"
    entities: List[Entity] = Field(default_factory=list)
    intent: IntentResult = Field(default_factory=IntentResult)
    temporal: TemporalAnalysis = Field(default_factory=TemporalAnalysis)
    suggested_actions: List[Action] = Field(default_factory=list)
    success: bool = True
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.now)

    @field_validator("error")
    @classmethod
    def error_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v
