"""
Event ingestion boundary.

Validates an inbound document against the compiled event schema and, only
when it conforms, constructs the typed event and appends it to the store.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog

from eventgate.schemas.events import parse_event, StoredEvent
from eventgate.schemas.model import Schema
from eventgate.schemas.validator import Validator
from eventgate.storage.base import EventStore
from eventgate.utils.errors import ValidationFailed, create_error_context
from eventgate.utils.tracing import add_span_event, set_span_attribute, trace_async_function


logger = structlog.get_logger(__name__)


class EventIngestor:
    """Validate-then-insert pipeline for a single event document."""

    def __init__(
        self,
        schema: Schema,
        store: EventStore,
        validator: Optional[Validator] = None,
    ) -> None:
        self._schema = schema
        self._store = store
        self._validator = validator if validator is not None else Validator()

    @property
    def schema(self) -> Schema:
        return self._schema

    async def ingest(self, instance: Any) -> StoredEvent:
        """
        Ingest one candidate event.

        Raises:
            ValidationFailed: If ``instance`` does not satisfy the schema;
                nothing is persisted in that case
        """
        async with trace_async_function("event_ingest.ingest"):
            errors = self._validator.validate(self._schema, instance)
            set_span_attribute("validation.error_count", len(errors))
            if errors:
                add_span_event("event.rejected", {"error_count": len(errors)})
                logger.warning("Event rejected", error_count=len(errors))
                raise ValidationFailed(
                    errors,
                    context=create_error_context(service="event-ingest", operation="ingest"),
                )

            event = parse_event(instance)
            stored = await self._store.insert(event)

            set_span_attribute("event.type", event.type)
            logger.info("Event stored", event_id=stored.id, event_type=event.type)
            return stored
