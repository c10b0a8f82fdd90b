"""
Entry point for the event-ingest service.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Optional

from aiohttp import web
import structlog

from eventgate.framework.health import HealthCheck
from eventgate.framework.service import AsyncService
from eventgate.schemas.events import DISCRIMINANT_FIELD, EventType
from eventgate.schemas.registry import SchemaRegistry
from eventgate.schemas.validator import Validator
from eventgate.storage.base import EventStore
from eventgate.storage.memory import InMemoryEventStore
from eventgate.storage.postgres import PostgresClient, PostgresConfig, PostgresEventStore
from eventgate.utils.errors import SchemaCompilationError, StorageError, ValidationFailed
from eventgate.utils.logging import setup_logging
from eventgate.utils.tracing import setup_tracing

from .aggregator import LifetimeValueAggregator
from .config import EventIngestConfig
from .ingestion import EventIngestor

logger = structlog.get_logger(__name__)

_KNOWN_EVENT_TYPES = {event_type.value for event_type in EventType}


def _event_type_label(document: Any) -> str:
    """Metric label for a document; bounded to the known event types."""
    if isinstance(document, dict):
        value = document.get(DISCRIMINANT_FIELD)
        if value in _KNOWN_EVENT_TYPES:
            return value
    return "unknown"


def build_event_store(config: EventIngestConfig) -> EventStore:
    """Create the configured event store backend."""
    if config.store_backend == "postgres":
        client = PostgresClient(
            PostgresConfig(
                dsn=config.database.postgres_dsn,
                min_size=config.database.pool_min_size,
                max_size=config.database.pool_max_size,
                timeout=config.database.command_timeout,
            )
        )
        return PostgresEventStore(client, table=config.events_table)
    return InMemoryEventStore()


class EventIngestService(AsyncService):
    """Service accepting analytics events and answering LTV queries."""

    def __init__(
        self,
        config: Optional[EventIngestConfig] = None,
        store: Optional[EventStore] = None,
        registry: Optional[SchemaRegistry] = None,
    ) -> None:
        config = config if config is not None else EventIngestConfig()
        super().__init__(config)
        self.config = config

        # The schema is compiled exactly once; SchemaCompilationError stops startup here.
        if registry is None:
            registry = SchemaRegistry(
                validator=Validator(max_errors=config.max_validation_errors)
            )
        self.registry = registry
        if config.schema_name in self.registry.get_supported_schemas():
            self.schema = self.registry.get_schema(config.schema_name)
        else:
            self.schema = self.registry.load_file(config.schema_name, config.schema_path)

        self.store = store if store is not None else build_event_store(config)
        self.ingestor = EventIngestor(self.schema, self.store, self.registry.validator)
        self.aggregator = LifetimeValueAggregator(self.store)

        self.health_checker.add_check(
            HealthCheck(
                name="event_store",
                check_func=self.store.health_check,
                description="Event store reachability",
            )
        )

        # Metrics
        self.metrics_events = self.metrics.create_counter(
            "events_total",
            "Number of ingestion attempts by event type and outcome",
            labels=["event_type", "status"],
        )
        self.metrics_validation_errors = self.metrics.create_counter(
            "validation_errors_total",
            "Number of validation errors reported to producers",
        )

    async def _startup_hook(self) -> None:
        """Execute service-specific startup logic."""
        startup = getattr(self.store, "startup", None)
        if startup is not None:
            await startup()
        logger.info(
            "Event-ingest service started",
            schema_name=self.config.schema_name,
            store_backend=self.config.store_backend,
        )

    async def _shutdown_hook(self) -> None:
        """Execute service-specific shutdown logic."""
        shutdown = getattr(self.store, "shutdown", None)
        if shutdown is not None:
            await shutdown()
        logger.info("Event-ingest service stopped")

    def _setup_service_routes(self) -> None:
        self.app.router.add_post("/v1/events", self._post_event_handler)
        self.app.router.add_get("/v1/ltv", self._ltv_handler)
        self.app.router.add_get("/v1/schema", self._schema_handler)
        self.app.router.add_get("/status", self._status_handler)

    async def _post_event_handler(self, request: web.Request) -> web.Response:
        """Validate and store one event document."""
        try:
            document = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            self.metrics_events.labels(event_type="unknown", status="malformed").inc()
            logger.warning("Malformed event body", error=str(exc))
            return web.json_response({"error": f"Malformed JSON body: {exc}"}, status=400)

        try:
            stored = await self.ingestor.ingest(document)
        except ValidationFailed as exc:
            self.metrics_events.labels(event_type=_event_type_label(document), status="invalid").inc()
            self.metrics_validation_errors.inc(len(exc.errors))
            return web.json_response(exc.to_list(), status=400)
        except StorageError:
            self.metrics.record_error(error_type="StorageError", component="event_store")
            raise

        self.metrics_events.labels(event_type=stored.event.type, status="stored").inc()
        return web.json_response(stored.to_document())

    async def _ltv_handler(self, request: web.Request) -> web.Response:
        """Sum Order Completed revenue for ``userId``."""
        ltv = await self.aggregator.lifetime_value(request.query.get("userId"))
        return web.json_response({"ltv": ltv})

    async def _schema_handler(self, request: web.Request) -> web.Response:
        """Return the event schema in its keyword form."""
        return web.json_response(self.schema.to_raw())

    async def _status_handler(self, request: web.Request) -> web.Response:
        """Return basic runtime information."""
        data = {
            "service": self.config.service_slug,
            "schema_name": self.config.schema_name,
            "schema_versions": self.registry.get_schema_versions(self.config.schema_name),
            "store_backend": self.config.store_backend,
            "max_validation_errors": self.config.max_validation_errors,
        }
        return web.json_response(data)


async def main() -> None:
    """Service entrypoint."""
    config = EventIngestConfig()
    setup_logging(
        config.service_slug,
        log_level=config.observability.log_level,
        format_type=config.observability.log_format,
    )
    setup_tracing(
        config.service_slug,
        endpoint=config.observability.otel_endpoint,
        enabled=config.observability.trace_enabled,
    )

    try:
        service = EventIngestService(config=config)
    except SchemaCompilationError as exc:
        logger.error("Invalid event schema, refusing to start", **exc.to_dict())
        sys.exit(1)

    await service.run()


if __name__ == "__main__":
    asyncio.run(main())
