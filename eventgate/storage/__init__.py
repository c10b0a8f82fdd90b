"""
Storage abstractions for the event services.

Provides:
- The event store contract
- In-memory store (local runs, tests)
- PostgreSQL store (JSONB documents)
"""

from .base import EventStore
from .memory import InMemoryEventStore
from .postgres import PostgresClient, PostgresConfig, PostgresEventStore

__all__ = [
    "EventStore",
    "InMemoryEventStore",
    "PostgresClient",
    "PostgresConfig",
    "PostgresEventStore",
]
