"""
Custom error classes for the event ingestion services.

Provides structured error handling with error codes,
context information, and proper exception chaining.
"""

from typing import Optional, Dict, Any, List, Sequence, TYPE_CHECKING
from dataclasses import dataclass

if TYPE_CHECKING:
    from eventgate.schemas.validator import ValidationError


@dataclass
class ErrorContext:
    """Error context information."""
    service: str
    operation: str
    event_type: Optional[str] = None
    correlation_id: Optional[str] = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.metadata is None:
            self.metadata = {}


class DataProcessingError(Exception):
    """Base exception for event processing errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        result = {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

        if self.context:
            result["context"] = {
                "service": self.context.service,
                "operation": self.context.operation,
                "event_type": self.context.event_type,
                "correlation_id": self.context.correlation_id,
                "metadata": self.context.metadata,
            }

        return result


class SchemaCompilationError(DataProcessingError):
    """Raised when a raw schema description cannot be compiled.

    An invalid schema is a configuration defect: the service must not start
    with one.
    """

    def __init__(
        self,
        message: str,
        keyword: Optional[str] = None,
        schema_path: Optional[Sequence[str]] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="SCHEMA_COMPILATION_ERROR",
            context=context,
            details=details or {}
        )
        self.keyword = keyword
        self.schema_path = list(schema_path or [])

        if keyword:
            self.details["keyword"] = keyword
        self.details["schema_path"] = self.schema_path


class ValidationFailed(DataProcessingError):
    """Raised when an instance does not satisfy its schema.

    Carries the validator output verbatim so callers can serialise it
    without any reshaping.
    """

    def __init__(
        self,
        errors: List["ValidationError"],
        message: Optional[str] = None,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(
            message=message or f"Instance failed validation with {len(errors)} error(s)",
            error_code="VALIDATION_FAILED",
            context=context,
            details={"error_count": len(errors)}
        )
        self.errors = list(errors)

    def to_list(self) -> List[Dict[str, List[str]]]:
        """Wire representation: one object per validation error."""
        return [error.to_dict() for error in self.errors]


class SchemaNotFoundError(DataProcessingError):
    """Raised when a schema name or version is not registered."""

    def __init__(
        self,
        message: str,
        schema_name: Optional[str] = None,
        schema_version: Optional[str] = None,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(
            message=message,
            error_code="SCHEMA_NOT_FOUND",
            context=context,
        )
        self.schema_name = schema_name
        self.schema_version = schema_version

        if schema_name:
            self.details["schema_name"] = schema_name
        if schema_version:
            self.details["schema_version"] = schema_version


class StorageError(DataProcessingError):
    """Error raised when storage operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="STORAGE_ERROR",
            context=context,
            details=details or {}
        )
        self.operation = operation
        self.table = table

        if operation:
            self.details["operation"] = operation
        if table:
            self.details["table"] = table


class ConfigurationError(DataProcessingError):
    """Error raised when configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[ErrorContext] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            context=context,
            details=details or {}
        )
        self.config_key = config_key
        self.config_value = config_value

        if config_key:
            self.details["config_key"] = config_key
        if config_value is not None:
            self.details["config_value"] = str(config_value)


def create_error_context(
    service: str,
    operation: str,
    event_type: Optional[str] = None,
    correlation_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> ErrorContext:
    """Create error context."""
    return ErrorContext(
        service=service,
        operation=operation,
        event_type=event_type,
        correlation_id=correlation_id,
        metadata=metadata or {}
    )
