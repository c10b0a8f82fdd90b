"""
OpenTelemetry tracing setup for the event services.

Provides tracer configuration with an OTLP exporter
and span helpers used around ingestion and queries.
"""

import os
from typing import Optional, Dict, Any
from contextlib import asynccontextmanager
import structlog

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor


logger = structlog.get_logger(__name__)

TRACER_NAME = "eventgate"


def _build_otlp_exporter_kwargs(endpoint_override: Optional[str] = None) -> Dict[str, Any]:
    endpoint = (
        endpoint_override
        or os.getenv("OTEL_EXPORTER_OTLP_TRACES_ENDPOINT")
        or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        or "http://otel-collector:4317"
    )
    headers_env = os.getenv("OTEL_EXPORTER_OTLP_HEADERS")
    headers: Dict[str, str] = {}
    if headers_env:
        for segment in headers_env.split(","):
            if not segment or "=" not in segment:
                continue
            key, value = segment.split("=", 1)
            key = key.strip()
            if key:
                headers[key] = value.strip()

    exporter_kwargs: Dict[str, Any] = {"endpoint": endpoint}
    if headers:
        exporter_kwargs["headers"] = headers

    if endpoint.startswith("http://"):
        exporter_kwargs["insecure"] = True

    return exporter_kwargs


def setup_tracing(
    service_name: str,
    endpoint: Optional[str] = None,
    enabled: bool = True
) -> None:
    """
    Setup OpenTelemetry tracing for the service.

    Args:
        service_name: Name of the service
        endpoint: OTLP endpoint URL
        enabled: Whether spans are exported
    """
    if not enabled:
        logger.info("Tracing disabled by configuration")
        return

    tracer_provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(**_build_otlp_exporter_kwargs(endpoint)))
    )
    trace.set_tracer_provider(tracer_provider)

    logger.info("Tracing setup complete", endpoint=endpoint)


def get_tracer(name: Optional[str] = None) -> trace.Tracer:
    """Get OpenTelemetry tracer."""
    return trace.get_tracer(name or TRACER_NAME)


def set_span_attribute(key: str, value: Any) -> None:
    """Set attribute on current span."""
    trace.get_current_span().set_attribute(key, value)


def add_span_event(name: str, attributes: Optional[Dict[str, Any]] = None) -> None:
    """Add event to current span."""
    trace.get_current_span().add_event(name, attributes or {})


@asynccontextmanager
async def trace_async_function(
    name: str,
    attributes: Optional[Dict[str, Any]] = None
):
    """Run the enclosed block inside a new span; exceptions propagate."""
    with get_tracer().start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                if value is not None:
                    span.set_attribute(key, value)

        # start_as_current_span records the exception and sets an error status
        yield span
