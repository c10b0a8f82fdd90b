"""
Schema compiler.

Turns a raw schema description (the parsed JSON keyword form) into an
immutable Schema Model, rejecting structurally invalid schemas with a
SchemaCompilationError that names the offending keyword and the schema
path of the node it was found on.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from eventgate.utils.errors import SchemaCompilationError

from .model import (
    DiscriminatorSchema,
    ElementsSchema,
    EmptySchema,
    PropertiesSchema,
    Schema,
    SchemaForm,
    TypeName,
    TypeSchema,
    ValuesSchema,
)


METADATA_KEYWORD = "metadata"

FORM_KEYWORDS: Dict[SchemaForm, Tuple[str, ...]] = {
    SchemaForm.TYPE: ("type",),
    SchemaForm.PROPERTIES: ("properties", "optionalProperties"),
    SchemaForm.ELEMENTS: ("elements",),
    SchemaForm.VALUES: ("values",),
    SchemaForm.DISCRIMINATOR: ("discriminator",),
}

KEYWORDS = frozenset(
    [METADATA_KEYWORD] + [keyword for keywords in FORM_KEYWORDS.values() for keyword in keywords]
)

DISCRIMINATOR_KEYWORDS = ("tag", "mapping")

_TYPE_NAMES = {type_name.value: type_name for type_name in TypeName}


def compile_schema(raw: Any) -> Schema:
    """
    Compile a raw schema description into a Schema Model.

    Args:
        raw: Parsed JSON schema description (a dict of schema keywords)

    Returns:
        The compiled, immutable schema

    Raises:
        SchemaCompilationError: If the description is not a valid schema
    """
    return _compile(raw, [])


def _fail(message: str, path: Sequence[str], keyword: Optional[str] = None) -> SchemaCompilationError:
    return SchemaCompilationError(message, keyword=keyword, schema_path=path)


def _compile(raw: Any, path: List[str]) -> Schema:
    if not isinstance(raw, dict):
        raise _fail(f"Schema must be an object, got {type(raw).__name__}", path)

    unknown = [key for key in raw if key not in KEYWORDS]
    if unknown:
        raise _fail(
            f"Unknown schema keyword(s): {', '.join(sorted(unknown))}",
            path,
            keyword=sorted(unknown)[0],
        )

    if METADATA_KEYWORD in raw and not isinstance(raw[METADATA_KEYWORD], dict):
        raise _fail("metadata must be an object", path + [METADATA_KEYWORD], keyword=METADATA_KEYWORD)

    used: List[Tuple[SchemaForm, List[str]]] = []
    for form, keywords in FORM_KEYWORDS.items():
        present = [keyword for keyword in keywords if keyword in raw]
        if present:
            used.append((form, present))

    if len(used) > 1:
        clashing = [keyword for _, present in used for keyword in present]
        raise _fail(
            f"Mutually exclusive schema keywords: {', '.join(clashing)}",
            path,
            keyword=clashing[1],
        )

    if not used:
        return EmptySchema()

    form = used[0][0]
    if form is SchemaForm.TYPE:
        return _compile_type(raw["type"], path)
    if form is SchemaForm.PROPERTIES:
        return _compile_properties(raw, path)
    if form is SchemaForm.ELEMENTS:
        return ElementsSchema(of=_compile(raw["elements"], path + ["elements"]))
    if form is SchemaForm.VALUES:
        return ValuesSchema(of=_compile(raw["values"], path + ["values"]))
    return _compile_discriminator(raw["discriminator"], path + ["discriminator"])


def _compile_type(value: Any, path: List[str]) -> TypeSchema:
    if not isinstance(value, str) or value not in _TYPE_NAMES:
        raise _fail(f"Unknown type name: {value!r}", path + ["type"], keyword="type")
    return TypeSchema(name=_TYPE_NAMES[value])


def _compile_property_map(raw: Any, path: List[str], keyword: str) -> Dict[str, Schema]:
    if not isinstance(raw, dict):
        raise _fail(f"{keyword} must be an object", path, keyword=keyword)
    return {key: _compile(value, path + [key]) for key, value in raw.items()}


def _compile_properties(raw: Mapping[str, Any], path: List[str]) -> PropertiesSchema:
    has_required = "properties" in raw
    required = (
        _compile_property_map(raw["properties"], path + ["properties"], "properties")
        if has_required
        else {}
    )
    optional = (
        _compile_property_map(raw["optionalProperties"], path + ["optionalProperties"], "optionalProperties")
        if "optionalProperties" in raw
        else {}
    )

    overlap = [key for key in required if key in optional]
    if overlap:
        raise _fail(
            f"Property declared as both required and optional: {', '.join(overlap)}",
            path + ["optionalProperties", overlap[0]],
            keyword="optionalProperties",
        )

    return PropertiesSchema(required=required, optional=optional, has_required=has_required)


def _compile_discriminator(raw: Any, path: List[str]) -> DiscriminatorSchema:
    if not isinstance(raw, dict):
        raise _fail("discriminator must be an object", path, keyword="discriminator")

    unknown = [key for key in raw if key not in DISCRIMINATOR_KEYWORDS]
    if unknown:
        raise _fail(
            f"Unknown discriminator keyword(s): {', '.join(sorted(unknown))}",
            path,
            keyword=sorted(unknown)[0],
        )

    for keyword in DISCRIMINATOR_KEYWORDS:
        if keyword not in raw:
            raise _fail(f"discriminator requires {keyword}", path, keyword=keyword)

    tag = raw["tag"]
    if not isinstance(tag, str):
        raise _fail("discriminator tag must be a string", path + ["tag"], keyword="tag")

    raw_mapping = raw["mapping"]
    if not isinstance(raw_mapping, dict):
        raise _fail("discriminator mapping must be an object", path + ["mapping"], keyword="mapping")

    mapping: Dict[str, PropertiesSchema] = {}
    for value, raw_member in raw_mapping.items():
        member_path = path + ["mapping", value]
        member = _compile(raw_member, member_path)
        if not isinstance(member, PropertiesSchema):
            raise _fail(
                f"Mapping member {value!r} must be a properties schema",
                member_path,
                keyword="mapping",
            )
        if member.declares(tag):
            raise _fail(
                f"Mapping member {value!r} redeclares discriminator tag {tag!r}",
                member_path,
                keyword="tag",
            )
        mapping[value] = member

    return DiscriminatorSchema(tag=tag, mapping=mapping)
