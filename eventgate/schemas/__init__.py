"""
Schema engine for inbound analytics events.

Provides:
- Compiled schema model
- Schema compiler
- Path-addressed validator
- Schema registry
- Typed event models
"""

from .model import (
    Schema,
    SchemaForm,
    TypeName,
    EmptySchema,
    TypeSchema,
    PropertiesSchema,
    ElementsSchema,
    ValuesSchema,
    DiscriminatorSchema,
)
from .compiler import compile_schema
from .validator import ValidationError, Validator, validate
from .registry import SchemaRegistry
from .events import Event, EventType, StoredEvent, parse_event

__all__ = [
    "Schema",
    "SchemaForm",
    "TypeName",
    "EmptySchema",
    "TypeSchema",
    "PropertiesSchema",
    "ElementsSchema",
    "ValuesSchema",
    "DiscriminatorSchema",
    "compile_schema",
    "ValidationError",
    "Validator",
    "validate",
    "SchemaRegistry",
    "Event",
    "EventType",
    "StoredEvent",
    "parse_event",
]
