"""
Core framework components for the event services.

Provides base classes for building observable
aiohttp services.
"""

from .service import AsyncService
from .config import ServiceConfig, HttpConfig, DatabaseConfig, ObservabilityConfig
from .health import HealthChecker, HealthCheck
from .metrics import MetricsCollector

__all__ = [
    "AsyncService",
    "ServiceConfig",
    "HttpConfig",
    "DatabaseConfig",
    "ObservabilityConfig",
    "HealthChecker",
    "HealthCheck",
    "MetricsCollector",
]
