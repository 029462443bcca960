"""Tests for field declarations and value coercion."""

from __future__ import annotations

import datetime

import pytest

from rest_api_provider import Field, FieldType, Resource, UnsupportedTypeError
from rest_api_provider.fields import (
    FieldRegistry,
    coerce_value,
    json_normalize,
    resolve_field_type,
    to_json,
)


class FieldExample(Resource):
    a = Field(int, default=1)
    b = Field(str)
    c = Field()
    ratio = Field(float, default=0.5)
    born_on = Field(datetime.date)
    seen_at = Field("timestamp")
    tags = Field(list, default=[])
    meta = Field(dict)


# ---------------------------------------------------------------------------
# Type resolution
# ---------------------------------------------------------------------------


class TestResolveFieldType:
    @pytest.mark.parametrize(
        ("declared", "expected"),
        [
            (str, FieldType.STRING),
            (int, FieldType.INTEGER),
            (float, FieldType.FLOAT),
            (datetime.date, FieldType.DATE),
            (datetime.datetime, FieldType.TIMESTAMP),
            (list, FieldType.LIST),
            (dict, FieldType.MAP),
            ("Integer", FieldType.INTEGER),
            (FieldType.MAP, FieldType.MAP),
            (None, None),
        ],
    )
    def test_accepted_types(self, declared, expected) -> None:
        assert resolve_field_type(declared) == expected

    @pytest.mark.parametrize("declared", [bool, set, "decimal", object, 3])
    def test_unsupported_type_names_allowed_set(self, declared) -> None:
        with pytest.raises(UnsupportedTypeError, match="string, integer"):
            resolve_field_type(declared)

    def test_unsupported_type_fails_at_class_creation(self) -> None:
        with pytest.raises(UnsupportedTypeError):

            class Broken(Resource):
                flag = Field(bool)

    def test_unsupported_type_is_a_type_error(self) -> None:
        with pytest.raises(TypeError):
            resolve_field_type(complex)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestFieldRegistry:
    def test_names_are_snake_case_and_ordered(self) -> None:
        registry = FieldRegistry()
        registry.declare("firstName", str)
        registry.declare("last_name", str)
        assert registry.names() == ["first_name", "last_name"]
        assert "firstName" in registry
        assert registry.get("FirstName").type is FieldType.STRING

    def test_redeclare_replaces_spec_in_place(self) -> None:
        registry = FieldRegistry()
        registry.declare("a", int, 1)
        registry.declare("b")
        registry.declare("a", str, "x")
        assert registry.names() == ["a", "b"]
        assert registry.get("a").default == "x"

    def test_defaults_are_fresh_copies(self) -> None:
        registry = FieldRegistry()
        registry.declare("tags", list, ["x"])
        first = registry.defaults()
        first["tags"].append("y")
        assert registry.defaults()["tags"] == ["x"]

    def test_copy_is_independent(self) -> None:
        registry = FieldRegistry()
        registry.declare("a")
        clone = registry.copy()
        clone.declare("b")
        assert "b" not in registry
        assert len(clone) == 2


# ---------------------------------------------------------------------------
# Coercion through field setters
# ---------------------------------------------------------------------------


class TestFieldDefaults:
    def test_returns_default_value(self) -> None:
        assert FieldExample().a == 1

    def test_without_default_returns_none(self) -> None:
        assert FieldExample().b is None

    def test_mutable_defaults_are_not_shared(self) -> None:
        first, second = FieldExample(), FieldExample()
        first.tags.append("x")
        assert second.tags == []


class TestTypedAssignment:
    def test_assigns_value_of_proper_type(self) -> None:
        obj = FieldExample()
        obj.a = 2
        obj.b = "2"
        assert obj.a == 2
        assert obj.b == "2"

    def test_does_not_assign_value_of_unexpected_type(self) -> None:
        obj = FieldExample()
        obj.a = "str"
        assert obj.a == 1

    def test_integer_parses_numeric_strings(self) -> None:
        obj = FieldExample()
        obj.a = " 42 "
        assert obj.a == 42

    def test_integer_rejects_booleans_and_none(self) -> None:
        obj = FieldExample()
        obj.a = True
        obj.a = None
        assert obj.a == 1

    def test_float_parses_and_keeps_previous_on_failure(self) -> None:
        obj = FieldExample()
        obj.ratio = "1.25"
        assert obj.ratio == 1.25
        obj.ratio = "abc"
        assert obj.ratio == 1.25

    def test_string_always_succeeds(self) -> None:
        obj = FieldExample()
        obj.b = 1
        assert obj.b == "1"
        obj.b = False
        assert obj.b == "false"
        obj.b = {"k": [1]}
        assert obj.b == '{"k": [1]}'

    def test_date_parses_iso_strings_and_timestamps(self) -> None:
        obj = FieldExample()
        obj.born_on = "2020-02-29"
        assert obj.born_on == datetime.date(2020, 2, 29)
        obj.born_on = datetime.datetime(2021, 1, 2, 3, 4)
        assert obj.born_on == datetime.date(2021, 1, 2)
        obj.born_on = "not a date"
        assert obj.born_on == datetime.date(2021, 1, 2)

    def test_timestamp_parses_iso_strings(self) -> None:
        obj = FieldExample()
        obj.seen_at = "2024-05-06T07:08:09Z"
        assert obj.seen_at == datetime.datetime(2024, 5, 6, 7, 8, 9, tzinfo=datetime.timezone.utc)
        obj.seen_at = "yesterday"
        assert obj.seen_at.year == 2024

    def test_list_and_map_require_matching_container(self) -> None:
        obj = FieldExample()
        obj.tags = ("a", 1)
        assert obj.tags == ["a", 1]
        obj.tags = {"not": "a list"}
        assert obj.tags == ["a", 1]
        obj.meta = {"aa": 2}
        assert obj.meta == {"aa": 2}
        obj.meta = [1]
        assert obj.meta == {"aa": 2}


class TestUntypedAssignment:
    def test_assigns_value_of_any_type_normalised(self) -> None:
        obj = FieldExample()
        obj.c = {"arr": ["123", 123]}
        assert obj.c == {"arr": ["123", 123]}

    def test_normalises_tuples_and_dates(self) -> None:
        obj = FieldExample()
        obj.c = {"when": datetime.date(2020, 1, 1), "pair": (1, 2)}
        assert obj.c == {"when": "2020-01-01", "pair": [1, 2]}

    def test_stored_value_is_a_copy(self) -> None:
        source = {"nested": [1]}
        obj = FieldExample()
        obj.c = source
        source["nested"].append(2)
        assert obj.c == {"nested": [1]}

    def test_unserialisable_value_is_stored_as_is(self) -> None:
        marker = object()
        obj = FieldExample()
        obj.c = marker
        assert obj.c is marker


class TestCoerceValue:
    def test_string_keeps_none(self) -> None:
        assert coerce_value(FieldType.STRING, None) is None

    def test_json_helpers(self) -> None:
        assert to_json({"d": datetime.date(2020, 1, 2)}) == '{"d": "2020-01-02"}'
        assert json_normalize(FieldExample(a=3))["a"] == 3
