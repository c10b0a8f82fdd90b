"""Unit tests for event storage backends."""

import json
import uuid
from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest

from eventgate.schemas.events import EventType, parse_event
from eventgate.storage.base import EventStore
from eventgate.storage.memory import InMemoryEventStore
from eventgate.storage.postgres import PostgresClient, PostgresConfig, PostgresEventStore
from eventgate.utils.errors import ConfigurationError, StorageError
from tests.fixtures.sample_events import SampleEventGenerator


class TestInMemoryEventStore:
    """Test InMemoryEventStore class."""

    def test_satisfies_protocol(self, memory_store):
        assert isinstance(memory_store, EventStore)

    @pytest.mark.asyncio
    async def test_insert_assigns_unique_ids(self, memory_store, sample_heartbeat):
        first = await memory_store.insert(parse_event(sample_heartbeat))
        second = await memory_store.insert(parse_event(sample_heartbeat))
        assert first.id != second.id
        assert len(memory_store) == 2

    @pytest.mark.asyncio
    async def test_query_filters_by_type_and_user(self, memory_store):
        for document in SampleEventGenerator.generate_mixed("alice") + SampleEventGenerator.generate_mixed("bob"):
            await memory_store.insert(parse_event(document))

        orders = await memory_store.query(EventType.ORDER_COMPLETED, "alice")
        assert [stored.event.revenue for stored in orders] == [2, 5, 8]
        assert all(stored.event.user_id == "alice" for stored in orders)

    @pytest.mark.asyncio
    async def test_query_accepts_wire_type(self, memory_store, sample_page_viewed):
        await memory_store.insert(parse_event(sample_page_viewed))
        assert len(await memory_store.query("Page Viewed", "bob")) == 1

    @pytest.mark.asyncio
    async def test_query_unknown_user(self, memory_store, sample_order_completed):
        await memory_store.insert(parse_event(sample_order_completed))
        assert await memory_store.query(EventType.ORDER_COMPLETED, "nobody") == []

    @pytest.mark.asyncio
    async def test_health_check(self, memory_store):
        assert await memory_store.health_check() is True


def _mock_client():
    client = MagicMock(spec=PostgresClient)
    client.connect = AsyncMock()
    client.close = AsyncMock()
    client.execute = AsyncMock(return_value=[])
    client.execute_command = AsyncMock(return_value="INSERT 0 1")
    client.health_check = AsyncMock(return_value=True)
    return client


class TestPostgresEventStore:
    """Test PostgresEventStore with a mocked client."""

    def test_invalid_table_name(self):
        with pytest.raises(ConfigurationError):
            PostgresEventStore(_mock_client(), table="events; DROP TABLE users")

    @pytest.mark.asyncio
    async def test_startup_creates_table(self):
        client = _mock_client()
        store = PostgresEventStore(client, table="analytics_events")
        await store.startup()

        client.connect.assert_awaited_once()
        statements = [call.args[0] for call in client.execute_command.await_args_list]
        assert any("CREATE TABLE IF NOT EXISTS analytics_events" in s for s in statements)
        assert any("CREATE INDEX IF NOT EXISTS analytics_events_type_user_idx" in s for s in statements)

    @pytest.mark.asyncio
    async def test_insert(self, sample_order_completed):
        client = _mock_client()
        store = PostgresEventStore(client)
        stored = await store.insert(parse_event(sample_order_completed))

        args = client.execute_command.await_args.args
        assert "INSERT INTO events" in args[0]
        assert args[1] == uuid.UUID(stored.id)
        assert args[2] == "Order Completed"
        assert args[3] == "bob"
        assert json.loads(args[4]) == sample_order_completed

    @pytest.mark.asyncio
    async def test_insert_failure(self, sample_heartbeat):
        client = _mock_client()
        client.execute_command.side_effect = asyncpg.PostgresError("insert failed")
        store = PostgresEventStore(client)

        with pytest.raises(StorageError) as exc_info:
            await store.insert(parse_event(sample_heartbeat))
        assert exc_info.value.operation == "insert"
        assert exc_info.value.table == "events"

    @pytest.mark.asyncio
    async def test_query(self, sample_order_completed):
        event_id = uuid.uuid4()
        client = _mock_client()
        client.execute.return_value = [
            {"id": event_id, "document": json.dumps(sample_order_completed)},
            {"id": uuid.uuid4(), "document": {**sample_order_completed, "revenue": 2}},
        ]
        store = PostgresEventStore(client)

        results = await store.query(EventType.ORDER_COMPLETED, "bob")

        args = client.execute.await_args.args
        assert args[1:] == ("Order Completed", "bob")
        assert results[0].id == str(event_id)
        assert [stored.event.revenue for stored in results] == [40, 2]

    @pytest.mark.asyncio
    async def test_health_check_and_shutdown(self):
        client = _mock_client()
        store = PostgresEventStore(client)
        assert await store.health_check() is True
        await store.shutdown()
        client.close.assert_awaited_once()


class TestPostgresClient:
    """Test PostgresClient without a server."""

    def test_dsn_string_config(self):
        client = PostgresClient("postgresql://localhost/test")
        assert client.config == PostgresConfig(dsn="postgresql://localhost/test")
        assert not client.is_connected

    @pytest.mark.asyncio
    async def test_health_check(self):
        client = PostgresClient("postgresql://localhost/test")
        client.execute_scalar = AsyncMock(return_value=1)
        assert await client.health_check() is True

    @pytest.mark.asyncio
    async def test_health_check_failure(self):
        client = PostgresClient("postgresql://localhost/test")
        client.execute_scalar = AsyncMock(side_effect=OSError("connection refused"))
        assert await client.health_check() is False

    @pytest.mark.asyncio
    async def test_disconnect_closes_pool(self):
        client = PostgresClient("postgresql://localhost/test")
        pool = MagicMock()
        pool.close = AsyncMock()
        client._pool = pool
        client.is_connected = True

        await client.disconnect()

        pool.close.assert_awaited_once()
        assert client._pool is None
        assert not client.is_connected
