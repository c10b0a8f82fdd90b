"""Lifetime-value aggregation over stored events."""

from __future__ import annotations

from typing import Iterable, Optional, Union

import structlog

from eventgate.schemas.events import EventType, StoredEvent
from eventgate.storage.base import EventStore
from eventgate.utils.tracing import trace_async_function


logger = structlog.get_logger(__name__)

Number = Union[int, float]


def sum_field(events: Iterable[StoredEvent], field_name: str) -> Number:
    """Sum ``field_name`` across events; the field is assumed present."""
    total: Number = 0
    for stored in events:
        total += getattr(stored.event, field_name)
    return total


class LifetimeValueAggregator:
    """Sums a numeric field over one user's events of one type."""

    def __init__(
        self,
        store: EventStore,
        event_type: EventType = EventType.ORDER_COMPLETED,
        field_name: str = "revenue",
    ) -> None:
        self.store = store
        self.event_type = event_type
        self.field_name = field_name

    async def lifetime_value(self, user_id: Optional[str]) -> Number:
        """Return the summed field for ``user_id``; 0 when the key is absent or unknown."""
        if user_id is None:
            return 0

        async with trace_async_function(
            "event_ingest.lifetime_value",
            attributes={"event.type": self.event_type.value},
        ):
            events = await self.store.query(self.event_type, user_id)
            total = sum_field(events, self.field_name)

        logger.debug(
            "Lifetime value computed",
            user_id=user_id,
            event_count=len(events),
            total=total,
        )
        return total
