"""Prometheus metrics collection for the event services."""

import time
from typing import Dict, Any, Optional

from aiohttp import web
from prometheus_client import (
    Counter, Histogram, Gauge, Info,
    CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST
)


DEFAULT_BUCKETS = [0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]


class MetricsCollector:
    """Centralized metrics collection; one private registry per service."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self.metrics: Dict[str, Any] = {}
        self._init_common_metrics()

    def _init_common_metrics(self):
        self.info = Info(
            f"{self.service_name}_info",
            f"Information about {self.service_name}",
            registry=self.registry
        )

        self.request_count = Counter(
            f"{self.service_name}_requests_total",
            f"Total number of requests processed by {self.service_name}",
            ["method", "endpoint", "status"],
            registry=self.registry
        )

        self.request_duration = Histogram(
            f"{self.service_name}_request_duration_seconds",
            f"Request duration in seconds for {self.service_name}",
            ["method", "endpoint"],
            buckets=DEFAULT_BUCKETS,
            registry=self.registry
        )

        self.errors_total = Counter(
            f"{self.service_name}_errors_total",
            f"Total number of errors in {self.service_name}",
            ["error_type", "component"],
            registry=self.registry
        )

        self.health_status = Gauge(
            f"{self.service_name}_health_status",
            f"Health status of {self.service_name} (1=healthy, 0=unhealthy)",
            registry=self.registry
        )

        self.memory_usage = Gauge(
            f"{self.service_name}_memory_usage_bytes",
            f"Memory usage in bytes for {self.service_name}",
            registry=self.registry
        )

    def create_counter(self, name: str, description: str, labels: Optional[list] = None) -> Counter:
        """Create a custom counter metric."""
        counter = Counter(f"{self.service_name}_{name}", description, labels or [], registry=self.registry)
        self.metrics[name] = counter
        return counter

    def record_request(self, method: str, endpoint: str, status: str, duration: float):
        """Record a request metric."""
        self.request_count.labels(method=method, endpoint=endpoint, status=status).inc()
        self.request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def record_error(self, error_type: str, component: str):
        """Record an error metric."""
        self.errors_total.labels(error_type=error_type, component=component).inc()

    def set_health_status(self, healthy: bool):
        self.health_status.set(1 if healthy else 0)

    def set_memory_usage(self, bytes_used: int):
        self.memory_usage.set(bytes_used)

    def update_service_info(self, version: str, environment: str, **kwargs):
        """Update service information."""
        self.info.info({"version": version, "environment": environment, **kwargs})

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self.registry)

    def get_content_type(self) -> str:
        return CONTENT_TYPE_LATEST

    def middleware(self):
        """aiohttp middleware recording per-route request count and latency."""

        @web.middleware
        async def metrics_middleware(request: web.Request, handler):
            start = time.perf_counter()
            route = request.match_info.route.resource
            endpoint = route.canonical if route is not None else "unmatched"
            status = "500"
            try:
                response = await handler(request)
                status = str(response.status)
                return response
            except web.HTTPException as exc:
                status = str(exc.status)
                raise
            finally:
                self.record_request(request.method, endpoint, status, time.perf_counter() - start)

        return metrics_middleware
