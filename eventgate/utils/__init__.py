"""
Utility modules for the event services.

Provides common utilities for:
- Structured logging
- OpenTelemetry tracing
- Error handling
"""

from .logging import setup_logging
from .tracing import setup_tracing
from .errors import (
    DataProcessingError,
    SchemaCompilationError,
    ValidationFailed,
    SchemaNotFoundError,
    StorageError,
    ConfigurationError,
)

__all__ = [
    "setup_logging",
    "setup_tracing",
    "DataProcessingError",
    "SchemaCompilationError",
    "ValidationFailed",
    "SchemaNotFoundError",
    "StorageError",
    "ConfigurationError",
]
