"""
Schema validator.

Walks an untyped JSON-like instance against a compiled schema and reports
every mismatch as a pair of paths: where in the instance, and where in the
schema. The output is deterministic (pre-order, schema declaration order)
so that independent implementations of the same schema report identical
error lists.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .model import (
    FLOAT_TYPES,
    INTEGER_RANGES,
    DiscriminatorSchema,
    ElementsSchema,
    EmptySchema,
    PropertiesSchema,
    Schema,
    TypeName,
    TypeSchema,
    ValuesSchema,
)


_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


@dataclass(frozen=True)
class ValidationError:
    """A single mismatch between an instance and a schema."""
    instance_path: Tuple[str, ...]
    schema_path: Tuple[str, ...]

    def to_dict(self) -> Dict[str, List[str]]:
        """Convert to the wire representation."""
        return {
            "instancePath": list(self.instance_path),
            "schemaPath": list(self.schema_path),
        }

    @staticmethod
    def _pointer(tokens: Tuple[str, ...]) -> str:
        return "".join("/" + token.replace("~", "~0").replace("/", "~1") for token in tokens)

    @property
    def instance_pointer(self) -> str:
        """Instance path as an RFC 6901 JSON Pointer."""
        return self._pointer(self.instance_path)

    @property
    def schema_pointer(self) -> str:
        """Schema path as an RFC 6901 JSON Pointer."""
        return self._pointer(self.schema_path)


class _MaxErrorsReached(Exception):
    """Internal signal used to unwind once max_errors is reached."""


class _ValidationState:
    """Per-call traversal state."""

    def __init__(self, max_errors: int):
        self.max_errors = max_errors
        self.errors: List[ValidationError] = []
        self.instance_tokens: List[str] = []
        self.schema_tokens: List[str] = []

    def push_error(self, *instance_suffix: str, schema_suffix: Tuple[str, ...] = ()) -> None:
        self.errors.append(
            ValidationError(
                instance_path=tuple(self.instance_tokens) + instance_suffix,
                schema_path=tuple(self.schema_tokens) + schema_suffix,
            )
        )
        if self.max_errors and len(self.errors) >= self.max_errors:
            raise _MaxErrorsReached()


def is_timestamp(value: Any) -> bool:
    """Whether ``value`` is an RFC 3339 date-time string."""
    if not isinstance(value, str):
        return False

    match = _RFC3339.match(value)
    if not match:
        return False

    year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
    # Leap seconds are valid in RFC 3339 but not representable by datetime.
    if second == 60:
        second = 59
    try:
        datetime(year, month, day, hour, minute, second)
    except ValueError:
        return False

    offset = match.group(8)
    if offset not in ("Z", "z"):
        offset_hours, offset_minutes = int(offset[1:3]), int(offset[4:6])
        if offset_hours > 23 or offset_minutes > 59:
            return False
    return True


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # NaN and Infinity are not JSON numbers
    return not isinstance(value, float) or math.isfinite(value)


def matches_type(name: TypeName, value: Any) -> bool:
    """Whether ``value`` has the runtime kind named by ``name``."""
    if name is TypeName.BOOLEAN:
        return isinstance(value, bool)
    if name is TypeName.STRING:
        return isinstance(value, str)
    if name is TypeName.TIMESTAMP:
        return is_timestamp(value)
    if not _is_number(value):
        return False
    if name in FLOAT_TYPES:
        return True

    if isinstance(value, float):
        if not value.is_integer():
            return False
        value = int(value)
    low, high = INTEGER_RANGES[name]
    return low <= value <= high


class Validator:
    """
    Validates instances against compiled schemas.

    The validator holds configuration only; all traversal state lives in a
    per-call object, so one instance may be shared across concurrent calls.
    """

    def __init__(self, max_errors: int = 0):
        """
        Args:
            max_errors: Stop after this many errors. Zero means report all.
        """
        if max_errors < 0:
            raise ValueError("max_errors must be >= 0")
        self.max_errors = max_errors

    def validate(self, schema: Schema, instance: Any) -> List[ValidationError]:
        """Return the validation errors for ``instance``; empty if it conforms."""
        state = _ValidationState(self.max_errors)
        try:
            self._validate(state, schema, instance)
        except _MaxErrorsReached:
            pass
        return state.errors

    def is_valid(self, schema: Schema, instance: Any) -> bool:
        """Whether ``instance`` conforms to ``schema``."""
        return not Validator(max_errors=1).validate(schema, instance)

    def _validate(
        self,
        state: _ValidationState,
        schema: Schema,
        instance: Any,
        parent_tag: Optional[str] = None,
    ) -> None:
        if isinstance(schema, EmptySchema):
            return

        if isinstance(schema, TypeSchema):
            if not matches_type(schema.name, instance):
                state.push_error(schema_suffix=("type",))
            return

        if isinstance(schema, PropertiesSchema):
            self._validate_properties(state, schema, instance, parent_tag)
            return

        if isinstance(schema, ElementsSchema):
            if not isinstance(instance, list):
                state.push_error(schema_suffix=("elements",))
                return
            state.schema_tokens.append("elements")
            for index, item in enumerate(instance):
                state.instance_tokens.append(str(index))
                self._validate(state, schema.of, item)
                state.instance_tokens.pop()
            state.schema_tokens.pop()
            return

        if isinstance(schema, ValuesSchema):
            if not isinstance(instance, dict):
                state.push_error(schema_suffix=("values",))
                return
            state.schema_tokens.append("values")
            for key, value in instance.items():
                state.instance_tokens.append(key)
                self._validate(state, schema.of, value)
                state.instance_tokens.pop()
            state.schema_tokens.pop()
            return

        if isinstance(schema, DiscriminatorSchema):
            self._validate_discriminator(state, schema, instance)
            return

        raise TypeError(f"Not a compiled schema: {schema!r}")

    def _validate_properties(
        self,
        state: _ValidationState,
        schema: PropertiesSchema,
        instance: Any,
        parent_tag: Optional[str],
    ) -> None:
        if not isinstance(instance, dict):
            keyword = "properties" if schema.has_required else "optionalProperties"
            state.push_error(schema_suffix=(keyword,))
            return

        state.schema_tokens.append("properties")
        for key, sub_schema in schema.required.items():
            if key == parent_tag:
                continue
            state.schema_tokens.append(key)
            if key in instance:
                state.instance_tokens.append(key)
                self._validate(state, sub_schema, instance[key])
                state.instance_tokens.pop()
            else:
                state.push_error()
            state.schema_tokens.pop()
        state.schema_tokens.pop()

        state.schema_tokens.append("optionalProperties")
        for key, sub_schema in schema.optional.items():
            if key == parent_tag or key not in instance:
                continue
            state.schema_tokens.append(key)
            state.instance_tokens.append(key)
            self._validate(state, sub_schema, instance[key])
            state.instance_tokens.pop()
            state.schema_tokens.pop()
        state.schema_tokens.pop()

    def _validate_discriminator(
        self,
        state: _ValidationState,
        schema: DiscriminatorSchema,
        instance: Any,
    ) -> None:
        if not isinstance(instance, dict):
            state.push_error(schema_suffix=("discriminator",))
            return

        if schema.tag not in instance:
            state.push_error(schema_suffix=("discriminator", "tag"))
            return

        tag_value = instance[schema.tag]
        if not isinstance(tag_value, str):
            state.push_error(schema.tag, schema_suffix=("discriminator", "tag"))
            return

        member = schema.mapping.get(tag_value)
        if member is None:
            state.push_error(schema.tag, schema_suffix=("discriminator", "mapping"))
            return

        state.schema_tokens.extend(("discriminator", "mapping", tag_value))
        self._validate(state, member, instance, parent_tag=schema.tag)
        del state.schema_tokens[-3:]


def validate(schema: Schema, instance: Any, max_errors: int = 0) -> List[ValidationError]:
    """Module-level convenience wrapper around Validator.validate."""
    return Validator(max_errors=max_errors).validate(schema, instance)
