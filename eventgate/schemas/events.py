"""
Typed analytics events.

Events are constructed from instances that already passed schema
validation. Construction is a field-by-field parse with variant dispatch on
the ``type`` discriminant; the resulting models are frozen.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


DISCRIMINANT_FIELD = "type"


class EventType(str, Enum):
    """Event type enumeration; values are the wire discriminants."""
    PAGE_VIEWED = "Page Viewed"
    HEARTBEAT = "Heartbeat"
    ORDER_COMPLETED = "Order Completed"


_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC datetime."""
    normalized = value.upper().replace("Z", "+00:00")
    # datetime cannot represent leap seconds
    if normalized[17:19] == "60":
        normalized = normalized[:17] + "59" + normalized[19:]
    # fromisoformat needs microsecond precision on older interpreters
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), normalized, count=1)
    dt = datetime.fromisoformat(normalized)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class BaseEvent(BaseModel):
    """Fields and behaviour shared by every event variant."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    user_id: str = Field(alias="userId")
    # Kept as the producer sent it so stored documents echo it verbatim.
    timestamp: str

    @property
    def occurred_at(self) -> datetime:
        return parse_timestamp(self.timestamp)

    def to_document(self) -> Dict[str, Any]:
        """Serialize into the wire document, including pass-through fields."""
        return self.model_dump(by_alias=True, mode="json")


class PageViewed(BaseEvent):
    type: Literal["Page Viewed"] = EventType.PAGE_VIEWED.value
    url: str


class Heartbeat(BaseEvent):
    type: Literal["Heartbeat"] = EventType.HEARTBEAT.value


class OrderCompleted(BaseEvent):
    type: Literal["Order Completed"] = EventType.ORDER_COMPLETED.value
    revenue: Union[int, float]


Event = Annotated[
    Union[PageViewed, Heartbeat, OrderCompleted],
    Field(discriminator=DISCRIMINANT_FIELD),
]

_EVENT_ADAPTER: TypeAdapter[Event] = TypeAdapter(Event)


def parse_event(document: Dict[str, Any]) -> Event:
    """
    Construct a typed event from a validated instance.

    Raises:
        pydantic.ValidationError: If the document does not describe an event
    """
    return _EVENT_ADAPTER.validate_python(document)


class StoredEvent(BaseModel):
    """An event plus the identity the store assigned to it."""

    model_config = ConfigDict(frozen=True)

    id: str
    event: Event

    @property
    def event_type(self) -> EventType:
        return EventType(self.event.type)

    def to_document(self) -> Dict[str, Any]:
        """Stored document: the original event fields plus ``_id``."""
        document = self.event.to_document()
        document["_id"] = self.id
        return document
