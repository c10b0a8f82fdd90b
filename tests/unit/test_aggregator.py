"""Unit tests for lifetime-value aggregation."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from eventgate.schemas.events import EventType, StoredEvent, parse_event
from services.event_ingest.app.aggregator import LifetimeValueAggregator, sum_field
from tests.fixtures.sample_events import SampleEventGenerator


def _stored_orders(*revenues):
    return [
        StoredEvent(id=str(i), event=parse_event(SampleEventGenerator.order_completed(revenue=revenue)))
        for i, revenue in enumerate(revenues)
    ]


class TestSumField:

    def test_sum(self):
        assert sum_field(_stored_orders(40, 2), "revenue") == 42

    def test_empty(self):
        assert sum_field([], "revenue") == 0

    def test_mixed_numbers(self):
        assert sum_field(_stored_orders(1, 2.5), "revenue") == pytest.approx(3.5)


class TestLifetimeValueAggregator:
    """Test LifetimeValueAggregator class."""

    @pytest.mark.asyncio
    async def test_sums_only_orders_for_user(self, memory_store):
        for document in SampleEventGenerator.generate_mixed("alice") + SampleEventGenerator.generate_mixed("bob", 3):
            await memory_store.insert(parse_event(document))

        aggregator = LifetimeValueAggregator(memory_store)
        assert await aggregator.lifetime_value("alice") == 15
        assert await aggregator.lifetime_value("bob") == 2

    @pytest.mark.asyncio
    async def test_unknown_user(self, memory_store):
        await memory_store.insert(parse_event(SampleEventGenerator.order_completed(user_id="alice")))
        assert await LifetimeValueAggregator(memory_store).lifetime_value("nobody") == 0

    @pytest.mark.asyncio
    async def test_absent_user_skips_store(self):
        store = MagicMock()
        store.query = AsyncMock(return_value=[])

        assert await LifetimeValueAggregator(store).lifetime_value(None) == 0
        store.query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_user_id_is_a_real_key(self, memory_store):
        await memory_store.insert(parse_event(SampleEventGenerator.order_completed(user_id="", revenue=5)))
        await memory_store.insert(parse_event(SampleEventGenerator.order_completed(user_id="bob", revenue=7)))

        assert await LifetimeValueAggregator(memory_store).lifetime_value("") == 5

    @pytest.mark.asyncio
    async def test_queries_configured_type(self):
        store = MagicMock()
        store.query = AsyncMock(return_value=_stored_orders(40, 2))

        assert await LifetimeValueAggregator(store).lifetime_value("bob") == 42
        store.query.assert_awaited_once_with(EventType.ORDER_COMPLETED, "bob")
