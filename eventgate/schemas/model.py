"""
In-memory representation of compiled schemas.

A compiled schema is a tree of frozen nodes, one node per schema form.
Nodes are immutable once built, so a single compiled schema can be shared
by any number of concurrent validations.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Union
from dataclasses import dataclass, field


class SchemaForm(Enum):
    """Schema form enumeration."""
    EMPTY = "empty"
    TYPE = "type"
    PROPERTIES = "properties"
    ELEMENTS = "elements"
    VALUES = "values"
    DISCRIMINATOR = "discriminator"


class TypeName(Enum):
    """Primitive type names accepted by the ``type`` keyword."""
    BOOLEAN = "boolean"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    STRING = "string"
    TIMESTAMP = "timestamp"


# Inclusive bounds for the integer kinds.
INTEGER_RANGES = {
    TypeName.INT8: (-128, 127),
    TypeName.UINT8: (0, 255),
    TypeName.INT16: (-32_768, 32_767),
    TypeName.UINT16: (0, 65_535),
    TypeName.INT32: (-2_147_483_648, 2_147_483_647),
    TypeName.UINT32: (0, 4_294_967_295),
}

FLOAT_TYPES = frozenset({TypeName.FLOAT32, TypeName.FLOAT64})


def _frozen(mapping: Mapping[str, "Schema"]) -> Mapping[str, "Schema"]:
    if isinstance(mapping, MappingProxyType):
        return mapping
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class EmptySchema:
    """Accepts any instance."""

    @property
    def form(self) -> SchemaForm:
        return SchemaForm.EMPTY

    def to_raw(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True)
class TypeSchema:
    """Matches a single primitive type."""
    name: TypeName

    @property
    def form(self) -> SchemaForm:
        return SchemaForm.TYPE

    def to_raw(self) -> Dict[str, Any]:
        return {"type": self.name.value}


@dataclass(frozen=True)
class PropertiesSchema:
    """Matches an object with required and optional members."""
    required: Mapping[str, "Schema"] = field(default_factory=dict)
    optional: Mapping[str, "Schema"] = field(default_factory=dict)
    # Set when the ``properties`` keyword was present, even if empty.
    has_required: bool = True

    def __post_init__(self):
        object.__setattr__(self, "required", _frozen(self.required))
        object.__setattr__(self, "optional", _frozen(self.optional))

    @property
    def form(self) -> SchemaForm:
        return SchemaForm.PROPERTIES

    def declares(self, key: str) -> bool:
        """Whether ``key`` is named as a required or optional property."""
        return key in self.required or key in self.optional

    def to_raw(self) -> Dict[str, Any]:
        raw: Dict[str, Any] = {}
        if self.has_required:
            raw["properties"] = {key: value.to_raw() for key, value in self.required.items()}
        if self.optional or not self.has_required:
            raw["optionalProperties"] = {key: value.to_raw() for key, value in self.optional.items()}
        return raw


@dataclass(frozen=True)
class ElementsSchema:
    """Matches a list whose items all match ``of``."""
    of: "Schema"

    @property
    def form(self) -> SchemaForm:
        return SchemaForm.ELEMENTS

    def to_raw(self) -> Dict[str, Any]:
        return {"elements": self.of.to_raw()}


@dataclass(frozen=True)
class ValuesSchema:
    """Matches an object whose values all match ``of``."""
    of: "Schema"

    @property
    def form(self) -> SchemaForm:
        return SchemaForm.VALUES

    def to_raw(self) -> Dict[str, Any]:
        return {"values": self.of.to_raw()}


@dataclass(frozen=True)
class DiscriminatorSchema:
    """Tagged union keyed by the string value of the ``tag`` member."""
    tag: str
    mapping: Mapping[str, PropertiesSchema]

    def __post_init__(self):
        object.__setattr__(self, "mapping", _frozen(self.mapping))

    @property
    def form(self) -> SchemaForm:
        return SchemaForm.DISCRIMINATOR

    def to_raw(self) -> Dict[str, Any]:
        return {
            "discriminator": {
                "tag": self.tag,
                "mapping": {key: value.to_raw() for key, value in self.mapping.items()},
            }
        }


Schema = Union[
    EmptySchema,
    TypeSchema,
    PropertiesSchema,
    ElementsSchema,
    ValuesSchema,
    DiscriminatorSchema,
]
