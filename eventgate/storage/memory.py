"""
In-process event store.

Used for local runs and tests. Documents live in a list guarded by an
asyncio lock; nothing survives a restart.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import List

import structlog

from eventgate.schemas.events import Event, EventType, StoredEvent


logger = structlog.get_logger(__name__)


class InMemoryEventStore:
    """Event store backed by a Python list."""

    def __init__(self) -> None:
        self._events: List[StoredEvent] = []
        self._lock = asyncio.Lock()

    async def insert(self, event: Event) -> StoredEvent:
        stored = StoredEvent(id=uuid.uuid4().hex, event=event)
        async with self._lock:
            self._events.append(stored)
        logger.debug("Event stored in memory", event_id=stored.id, event_type=event.type)
        return stored

    async def query(self, event_type: EventType, user_id: str) -> List[StoredEvent]:
        async with self._lock:
            snapshot = list(self._events)
        return [
            stored
            for stored in snapshot
            if stored.event.type == EventType(event_type).value and stored.event.user_id == user_id
        ]

    async def health_check(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._events)
