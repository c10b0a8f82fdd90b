"""
Event store contract.

The ingestion boundary and the aggregator depend only on this protocol;
backends decide how documents are laid out on disk.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from eventgate.schemas.events import Event, EventType, StoredEvent


@runtime_checkable
class EventStore(Protocol):
    """Append-only document store for validated events."""

    async def insert(self, event: Event) -> StoredEvent:
        """Persist ``event`` once and return it with its assigned identity."""

    async def query(self, event_type: EventType, user_id: str) -> List[StoredEvent]:
        """Return stored events of ``event_type`` for ``user_id`` in insertion order."""

    async def health_check(self) -> bool:
        """Whether the backend is reachable."""
