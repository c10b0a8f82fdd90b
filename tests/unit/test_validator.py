"""Unit tests for the schema validator."""

import copy
import json

import pytest

from eventgate.schemas.compiler import compile_schema
from eventgate.schemas.model import TypeName
from eventgate.schemas.validator import (
    ValidationError,
    Validator,
    is_timestamp,
    matches_type,
    validate,
)


def _paths(errors):
    return [(e.instance_path, e.schema_path) for e in errors]


class TestTypes:
    """Primitive type checks."""

    @pytest.mark.parametrize("value", [True, False, {}, [], None, 0, "x"])
    def test_empty_accepts_anything(self, value):
        assert validate(compile_schema({}), value) == []

    @pytest.mark.parametrize("name,value,expected", [
        ("boolean", True, True),
        ("boolean", 1, False),
        ("string", "", True),
        ("string", 1, False),
        ("float64", 1, True),
        ("float64", 1.5, True),
        ("float32", -3.25, True),
        ("float64", True, False),
        ("float64", "1", False),
        ("float64", None, False),
        ("float64", float("nan"), False),
        ("float64", float("inf"), False),
        ("float32", float("-inf"), False),
        ("uint32", float("inf"), False),
        ("int32", 10 ** 40, False),
        ("uint8", 255, True),
        ("uint8", 255.0, True),
        ("uint8", 256, False),
        ("uint8", -1, False),
        ("uint8", 1.5, False),
        ("uint8", False, False),
        ("int8", -128, True),
        ("int8", 128, False),
        ("int16", -32768, True),
        ("uint16", 65536, False),
        ("int32", 2147483647, True),
        ("int32", 2147483648, False),
        ("uint32", 4294967295, True),
        ("uint32", -1, False),
    ])
    def test_matches_type(self, name, value, expected):
        assert matches_type(TypeName(name), value) is expected

    @pytest.mark.parametrize("value", [
        "1985-04-12T23:20:50.52Z",
        "1996-12-19T16:39:57-08:00",
        "1990-12-31T23:59:60Z",
        "1990-12-31T15:59:60-08:00",
        "2024-01-01t00:00:00z",
        "2024-02-29T12:00:00+05:30",
    ])
    def test_valid_timestamps(self, value):
        assert is_timestamp(value)

    @pytest.mark.parametrize("value", [
        "2024-01-01",
        "2024-01-01 00:00:00Z",
        "2023-02-29T00:00:00Z",
        "2024-13-01T00:00:00Z",
        "2024-01-01T24:00:00Z",
        "2024-01-01T00:00:00",
        "2024-01-01T00:00:00+24:00",
        "not a date",
        1704067200,
        None,
    ])
    def test_invalid_timestamps(self, value):
        assert not is_timestamp(value)

    def test_type_mismatch_path(self):
        errors = validate(compile_schema({"type": "string"}), 1)
        assert _paths(errors) == [((), ("type",))]


class TestProperties:
    """Properties form paths."""

    schema_raw = {
        "properties": {"a": {"type": "string"}},
        "optionalProperties": {"b": {"type": "uint8"}},
    }

    def test_valid_with_extra_keys(self):
        schema = compile_schema(self.schema_raw)
        assert validate(schema, {"a": "x", "b": 1, "c": [1, 2]}) == []

    def test_optional_may_be_absent(self):
        assert validate(compile_schema(self.schema_raw), {"a": "x"}) == []

    def test_missing_required(self):
        errors = validate(compile_schema(self.schema_raw), {})
        assert _paths(errors) == [((), ("properties", "a"))]

    def test_wrong_required_and_optional_types(self):
        errors = validate(compile_schema(self.schema_raw), {"a": 1, "b": 300})
        assert _paths(errors) == [
            (("a",), ("properties", "a", "type")),
            (("b",), ("optionalProperties", "b", "type")),
        ]

    @pytest.mark.parametrize("value", [[], "a", 1, None])
    def test_non_object(self, value):
        errors = validate(compile_schema(self.schema_raw), value)
        assert _paths(errors) == [((), ("properties",))]

    def test_non_object_with_only_optional(self):
        errors = validate(compile_schema({"optionalProperties": {"b": {}}}), [])
        assert _paths(errors) == [((), ("optionalProperties",))]

    def test_required_in_declaration_order(self):
        schema = compile_schema({"properties": {"z": {}, "a": {}}})
        errors = validate(schema, {})
        assert _paths(errors) == [((), ("properties", "z")), ((), ("properties", "a"))]


class TestElementsAndValues:
    """Elements and values form paths."""

    def test_elements(self):
        errors = validate(compile_schema({"elements": {"type": "uint8"}}), [1, "x", 300])
        assert _paths(errors) == [
            (("1",), ("elements", "type")),
            (("2",), ("elements", "type")),
        ]

    def test_elements_non_list(self):
        errors = validate(compile_schema({"elements": {}}), {"0": 1})
        assert _paths(errors) == [((), ("elements",))]

    def test_elements_empty_list(self):
        assert validate(compile_schema({"elements": {"type": "string"}}), []) == []

    def test_values(self):
        errors = validate(compile_schema({"values": {"type": "string"}}), {"a": "x", "b": 2})
        assert _paths(errors) == [(("b",), ("values", "type"))]

    def test_values_non_object(self):
        errors = validate(compile_schema({"values": {}}), ["a"])
        assert _paths(errors) == [((), ("values",))]

    def test_nested_elements_of_properties(self):
        schema = compile_schema({"elements": {"properties": {"a": {"type": "uint8"}}}})
        errors = validate(schema, [{"a": 1}, {}, {"a": -1}])
        assert _paths(errors) == [
            (("1",), ("elements", "properties", "a")),
            (("2", "a"), ("elements", "properties", "a", "type")),
        ]


class TestDiscriminator:
    """Discriminator dispatch and the event schema scenarios."""

    def test_valid_events(self, event_schema, sample_order_completed, sample_page_viewed, sample_heartbeat):
        for event in (sample_order_completed, sample_page_viewed, sample_heartbeat):
            assert validate(event_schema, event) == []

    def test_missing_tag_reports_single_error(self, event_schema):
        errors = validate(event_schema, {})
        assert _paths(errors) == [((), ("discriminator", "tag"))]

    def test_missing_tag_ignores_other_members(self, event_schema):
        errors = validate(event_schema, {"userId": 5, "revenue": "x"})
        assert _paths(errors) == [((), ("discriminator", "tag"))]

    def test_non_string_tag(self, event_schema):
        errors = validate(event_schema, {"type": 5})
        assert _paths(errors) == [(("type",), ("discriminator", "tag"))]

    def test_unknown_tag(self, event_schema):
        errors = validate(event_schema, {"type": "Signed Up", "userId": 5})
        assert _paths(errors) == [(("type",), ("discriminator", "mapping"))]

    def test_tag_lookup_is_case_sensitive(self, event_schema):
        errors = validate(event_schema, {"type": "order completed"})
        assert _paths(errors) == [(("type",), ("discriminator", "mapping"))]

    @pytest.mark.parametrize("value", [[], "Heartbeat", None, 1])
    def test_non_object(self, event_schema, value):
        errors = validate(event_schema, value)
        assert _paths(errors) == [((), ("discriminator",))]

    def test_order_with_bad_revenue_and_missing_timestamp(self, event_schema):
        errors = validate(event_schema, {"type": "Order Completed", "userId": "bob", "revenue": "100"})
        member = ("discriminator", "mapping", "Order Completed")
        assert _paths(errors) == [
            (("revenue",), member + ("properties", "revenue", "type")),
            ((), member + ("properties", "timestamp")),
        ]

    def test_tag_is_not_checked_against_member(self, event_schema):
        errors = validate(event_schema, {"type": "Heartbeat"})
        member = ("discriminator", "mapping", "Heartbeat")
        assert _paths(errors) == [
            ((), member + ("properties", "userId")),
            ((), member + ("properties", "timestamp")),
        ]

    def test_discriminator_inside_elements(self, event_schema_raw):
        schema = compile_schema({"elements": event_schema_raw})
        errors = validate(schema, [{"type": "Heartbeat", "userId": "a"}, {}])
        assert _paths(errors) == [
            (("0",), ("elements", "discriminator", "mapping", "Heartbeat", "properties", "timestamp")),
            (("1",), ("elements", "discriminator", "tag")),
        ]


class TestValidatorBehaviour:
    """Determinism, limits and output format."""

    def test_max_errors(self):
        schema = compile_schema({"properties": {"a": {}, "b": {}, "c": {}}})
        assert len(Validator(max_errors=2).validate(schema, {})) == 2
        assert len(Validator().validate(schema, {})) == 3

    def test_max_errors_keeps_first_errors(self):
        schema = compile_schema({"elements": {"type": "string"}})
        errors = Validator(max_errors=1).validate(schema, [1, 2, 3])
        assert _paths(errors) == [(("0",), ("elements", "type"))]

    def test_negative_max_errors(self):
        with pytest.raises(ValueError):
            Validator(max_errors=-1)

    def test_is_valid(self, event_schema, sample_heartbeat):
        validator = Validator()
        assert validator.is_valid(event_schema, sample_heartbeat)
        assert not validator.is_valid(event_schema, {})

    def test_deterministic(self, event_schema_raw):
        instance = {"type": "Order Completed", "revenue": True}
        first = validate(compile_schema(event_schema_raw), instance)
        second = validate(compile_schema(event_schema_raw), instance)
        assert first == second
        assert len(first) == 3

    def test_instance_not_mutated(self, event_schema):
        instance = {"type": "Order Completed", "userId": 1, "nested": {"a": [1]}}
        before = copy.deepcopy(instance)
        validate(event_schema, instance)
        assert instance == before

    def test_json_round_trip_stays_valid(self, event_schema, sample_order_completed):
        sample_order_completed["revenue"] = 19.99
        assert validate(event_schema, sample_order_completed) == []
        reparsed = json.loads(json.dumps(sample_order_completed))
        assert validate(event_schema, reparsed) == []

    def test_error_to_dict(self):
        error = ValidationError(instance_path=("revenue",), schema_path=("properties", "revenue", "type"))
        assert error.to_dict() == {
            "instancePath": ["revenue"],
            "schemaPath": ["properties", "revenue", "type"],
        }

    def test_error_pointers(self):
        error = ValidationError(instance_path=("a/b", "0"), schema_path=("properties", "x~y"))
        assert error.instance_pointer == "/a~1b/0"
        assert error.schema_pointer == "/properties/x~0y"
        assert ValidationError((), ()).instance_pointer == ""
