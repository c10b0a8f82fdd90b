"""
PostgreSQL event storage.

Provides an async client wrapper with connection pooling and the
PostgreSQL-backed implementation of the event store contract. Event
documents are kept as JSONB next to the columns they are queried by.
"""

from __future__ import annotations

import json
import re
import uuid
from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass
import structlog

import asyncpg

from eventgate.schemas.events import Event, EventType, StoredEvent, parse_event
from eventgate.utils.errors import ConfigurationError, StorageError


logger = structlog.get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class PostgresConfig:
    """PostgreSQL configuration."""
    dsn: str
    min_size: int = 1
    max_size: int = 10
    timeout: int = 30


class PostgresClient:
    """
    Async PostgreSQL client with connection pooling.

    Provides a small query interface over an asyncpg pool
    with structured error logging.
    """

    def __init__(self, config: Union[PostgresConfig, str]):
        if isinstance(config, PostgresConfig):
            self.config = config
        else:
            self.config = PostgresConfig(dsn=config)

        self.logger = structlog.get_logger("postgres-client")
        self._pool: Optional[asyncpg.Pool] = None
        self.is_connected: bool = False

    async def connect(self) -> None:
        """Connect to PostgreSQL."""
        if self._pool:
            self.is_connected = True
            return

        self._pool = await asyncpg.create_pool(
            self.config.dsn,
            min_size=self.config.min_size,
            max_size=self.config.max_size,
            command_timeout=self.config.timeout
        )

        self.is_connected = True
        self.logger.info("Connected to PostgreSQL")

    async def disconnect(self) -> None:
        """Disconnect from PostgreSQL."""
        if self._pool:
            await self._pool.close()
            self._pool = None

        self.is_connected = False
        self.logger.info("Disconnected from PostgreSQL")

    async def close(self) -> None:
        """Alias for disconnect to mirror other storage clients."""
        await self.disconnect()

    async def execute(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        """Execute a SELECT query and return list of rows."""
        if not self._pool:
            await self.connect()

        async with self._pool.acquire() as conn:
            try:
                rows = await conn.fetch(query, *args)
                return [dict(row) for row in rows]
            except Exception as e:
                self.logger.error("PostgreSQL query error", error=str(e), query=query)
                raise

    async def execute_scalar(self, query: str, *args: Any) -> Any:
        """Execute a query returning a scalar value."""
        if not self._pool:
            await self.connect()

        async with self._pool.acquire() as conn:
            try:
                return await conn.fetchval(query, *args)
            except Exception as e:
                self.logger.error("PostgreSQL query error", error=str(e), query=query)
                raise

    async def execute_command(self, query: str, *args: Any) -> str:
        """Execute a statement that returns no rows (DDL, INSERT without RETURNING)."""
        if not self._pool:
            await self.connect()

        async with self._pool.acquire() as conn:
            try:
                return await conn.execute(query, *args)
            except Exception as e:
                self.logger.error("PostgreSQL command error", error=str(e), query=query)
                raise

    async def health_check(self) -> bool:
        """Check PostgreSQL health."""
        try:
            result = await self.execute_scalar("SELECT 1")
            return result == 1
        except Exception as e:
            self.logger.error("PostgreSQL health check failed", error=str(e))
            return False


class PostgresEventStore:
    """Event store persisting documents in a PostgreSQL JSONB table."""

    def __init__(self, client: PostgresClient, table: str = "events"):
        if not _IDENTIFIER.match(table):
            raise ConfigurationError("Invalid events table name", config_key="events_table", config_value=table)
        self.client = client
        self.table = table

    async def startup(self) -> None:
        """Connect and make sure the events table exists."""
        await self.client.connect()
        await self.client.execute_command(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                id UUID PRIMARY KEY,
                event_type TEXT NOT NULL,
                user_id TEXT NOT NULL,
                document JSONB NOT NULL,
                created_at TIMESTAMPTZ NOT NULL DEFAULT now()
            )
            """
        )
        await self.client.execute_command(
            f"CREATE INDEX IF NOT EXISTS {self.table}_type_user_idx "
            f"ON {self.table} (event_type, user_id)"
        )
        logger.info("Event table ready", table=self.table)

    async def shutdown(self) -> None:
        await self.client.close()

    async def insert(self, event: Event) -> StoredEvent:
        event_id = uuid.uuid4()
        try:
            await self.client.execute_command(
                f"INSERT INTO {self.table} (id, event_type, user_id, document) "
                f"VALUES ($1, $2, $3, $4::jsonb)",
                event_id,
                event.type,
                event.user_id,
                json.dumps(event.to_document()),
            )
        except asyncpg.PostgresError as exc:
            raise StorageError(
                f"Failed to insert event: {exc}",
                operation="insert",
                table=self.table,
            ) from exc

        logger.debug("Event stored", event_id=str(event_id), event_type=event.type)
        return StoredEvent(id=str(event_id), event=event)

    async def query(self, event_type: EventType, user_id: str) -> List[StoredEvent]:
        try:
            rows = await self.client.execute(
                f"SELECT id, document FROM {self.table} "
                f"WHERE event_type = $1 AND user_id = $2 ORDER BY created_at",
                EventType(event_type).value,
                user_id,
            )
        except asyncpg.PostgresError as exc:
            raise StorageError(
                f"Failed to query events: {exc}",
                operation="query",
                table=self.table,
            ) from exc

        return [
            StoredEvent(id=str(row["id"]), event=parse_event(_decode_document(row["document"])))
            for row in rows
        ]

    async def health_check(self) -> bool:
        return await self.client.health_check()


def _decode_document(value: Any) -> Dict[str, Any]:
    # asyncpg hands JSONB back as text unless a codec is registered
    if isinstance(value, str):
        return json.loads(value)
    return value
