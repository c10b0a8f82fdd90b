"""
Configuration for the event-ingest service.
"""

from __future__ import annotations

import os

from eventgate.framework.config import ServiceConfig
from eventgate.utils.errors import ConfigurationError


STORE_BACKENDS = ("memory", "postgres")


class EventIngestConfig(ServiceConfig):
    """Service configuration loaded from environment variables."""

    def __init__(self) -> None:
        super().__init__(service_name="event_ingest")

        # Hyphenated form used in logs and identifiers
        self.service_slug = "event-ingest"

        # Schema source, read and compiled once at startup
        self.schema_path = os.getenv("EVENT_INGEST_SCHEMA_PATH", "event.jddf.json")
        self.schema_name = os.getenv("EVENT_INGEST_SCHEMA_NAME", "event")

        # Zero reports every validation error
        self.max_validation_errors = int(
            os.getenv("EVENT_INGEST_MAX_VALIDATION_ERRORS", "0")
        )

        # Storage
        self.store_backend = os.getenv("EVENT_INGEST_STORE_BACKEND", "memory").lower()
        self.events_table = os.getenv("EVENT_INGEST_EVENTS_TABLE", "events")

        if self.store_backend not in STORE_BACKENDS:
            raise ConfigurationError(
                f"Invalid store backend: {self.store_backend}",
                config_key="store_backend",
                config_value=self.store_backend,
            )
        if self.max_validation_errors < 0:
            raise ConfigurationError(
                "max_validation_errors must be >= 0",
                config_key="max_validation_errors",
                config_value=self.max_validation_errors,
            )

    def to_dict(self):
        data = super().to_dict()
        data.update(
            {
                "schema_path": self.schema_path,
                "schema_name": self.schema_name,
                "max_validation_errors": self.max_validation_errors,
                "store_backend": self.store_backend,
                "events_table": self.events_table,
            }
        )
        return data
