"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from eventgate.schemas.compiler import compile_schema
from eventgate.storage.memory import InMemoryEventStore
from tests.fixtures.sample_events import SampleEventGenerator


REPO_ROOT = Path(__file__).resolve().parents[1]
EVENT_SCHEMA_PATH = REPO_ROOT / "event.jddf.json"


@pytest.fixture
def event_schema_path() -> Path:
    """Path to the event schema shipped with the service."""
    return EVENT_SCHEMA_PATH


@pytest.fixture
def event_schema_raw() -> Dict[str, Any]:
    """Raw event schema description."""
    return json.loads(EVENT_SCHEMA_PATH.read_text(encoding="utf-8"))


@pytest.fixture
def event_schema(event_schema_raw):
    """Compiled event schema."""
    return compile_schema(event_schema_raw)


@pytest.fixture
def memory_store():
    """Empty in-memory event store."""
    return InMemoryEventStore()


@pytest.fixture
def ingest_env(monkeypatch, event_schema_path):
    """Environment for an event-ingest service backed by memory."""
    monkeypatch.setenv("EVENT_INGEST_SCHEMA_PATH", str(event_schema_path))
    monkeypatch.setenv("EVENT_INGEST_STORE_BACKEND", "memory")
    monkeypatch.setenv("EVENTGATE_ENV", "local")
    monkeypatch.delenv("EVENT_INGEST_MAX_VALIDATION_ERRORS", raising=False)


@pytest.fixture
def sample_order_completed() -> Dict[str, Any]:
    """Sample Order Completed event fixture."""
    return SampleEventGenerator.order_completed(user_id="bob", revenue=40)


@pytest.fixture
def sample_page_viewed() -> Dict[str, Any]:
    """Sample Page Viewed event fixture."""
    return SampleEventGenerator.page_viewed(user_id="bob")


@pytest.fixture
def sample_heartbeat() -> Dict[str, Any]:
    """Sample Heartbeat event fixture."""
    return SampleEventGenerator.heartbeat(user_id="bob")
