"""
Configuration management for the event services.

Provides typed configuration classes with environment variable
injection and validation.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from eventgate.utils.errors import ConfigurationError


ENVIRONMENTS = ("local", "dev", "staging", "prod")
LOG_LEVELS = ("debug", "info", "warning", "error", "critical")
LOG_FORMATS = ("json", "console")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class HttpConfig:
    """HTTP listener configuration."""
    host: str = field(default_factory=lambda: os.getenv("EVENTGATE_HTTP_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("EVENTGATE_HTTP_PORT", "3000")))


@dataclass
class DatabaseConfig:
    """Database configuration."""
    postgres_dsn: str = field(default_factory=lambda: os.getenv("EVENTGATE_POSTGRES_DSN", "postgresql://localhost:5432/eventgate"))
    pool_min_size: int = field(default_factory=lambda: int(os.getenv("EVENTGATE_POSTGRES_POOL_MIN", "1")))
    pool_max_size: int = field(default_factory=lambda: int(os.getenv("EVENTGATE_POSTGRES_POOL_MAX", "10")))
    command_timeout: int = field(default_factory=lambda: int(os.getenv("EVENTGATE_POSTGRES_TIMEOUT", "30")))


@dataclass
class ObservabilityConfig:
    """Observability configuration."""
    log_level: str = field(default_factory=lambda: os.getenv("EVENTGATE_LOG_LEVEL", "info"))
    log_format: str = field(default_factory=lambda: os.getenv("EVENTGATE_LOG_FORMAT", "json"))
    trace_enabled: bool = field(default_factory=lambda: _env_bool("EVENTGATE_TRACE_ENABLED", "false"))
    otel_endpoint: Optional[str] = field(default_factory=lambda: os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"))


@dataclass
class ServiceConfig:
    """Base service configuration."""
    service_name: str
    environment: str = field(default_factory=lambda: os.getenv("EVENTGATE_ENV", "local"))
    version: str = field(default_factory=lambda: os.getenv("EVENTGATE_VERSION", "0.1.0"))

    # Sub-configurations
    http: HttpConfig = field(default_factory=HttpConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.service_name:
            raise ConfigurationError("service_name is required", config_key="service_name")

        if self.environment not in ENVIRONMENTS:
            raise ConfigurationError(
                f"Invalid environment: {self.environment}",
                config_key="environment",
                config_value=self.environment,
            )

        if self.observability.log_level.lower() not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.observability.log_level}",
                config_key="log_level",
                config_value=self.observability.log_level,
            )

        if self.observability.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"Invalid log format: {self.observability.log_format}",
                config_key="log_format",
                config_value=self.observability.log_format,
            )

        if not 0 <= self.http.port <= 65535:
            raise ConfigurationError(
                f"Invalid HTTP port: {self.http.port}",
                config_key="http_port",
                config_value=self.http.port,
            )

    @classmethod
    def from_env(cls, service_name: str) -> "ServiceConfig":
        """Create configuration from environment variables."""
        return cls(service_name=service_name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary. The DSN is left out."""
        return {
            "service_name": self.service_name,
            "environment": self.environment,
            "version": self.version,
            "http": {
                "host": self.http.host,
                "port": self.http.port,
            },
            "database": {
                "pool_min_size": self.database.pool_min_size,
                "pool_max_size": self.database.pool_max_size,
                "command_timeout": self.database.command_timeout,
            },
            "observability": {
                "log_level": self.observability.log_level,
                "log_format": self.observability.log_format,
                "trace_enabled": self.observability.trace_enabled,
            },
        }
