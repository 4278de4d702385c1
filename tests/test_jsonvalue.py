"""Tests for the tagged JSON value model."""

import pytest

from tc_cli.core.client import ValidationError
from tc_cli.core.jsonvalue import JSONKind, JSONValue, normalize_mapping

# =============================================================================
# Kind detection
# =============================================================================


class TestKinds:
    @pytest.mark.parametrize(
        ("obj", "kind"),
        [
            (None, JSONKind.NULL),
            (True, JSONKind.BOOLEAN),
            (False, JSONKind.BOOLEAN),
            (0, JSONKind.NUMBER),
            (1.5, JSONKind.NUMBER),
            ("", JSONKind.STRING),
            ([], JSONKind.ARRAY),
            ({}, JSONKind.OBJECT),
        ],
    )
    def test_from_python(self, obj, kind):
        assert JSONValue.from_python(obj).kind == kind

    def test_booleans_do_not_become_numbers(self):
        value = JSONValue.loads('{"flag": true, "count": 1}')
        assert value["flag"].kind == JSONKind.BOOLEAN
        assert value["flag"].value is True
        assert value["count"].kind == JSONKind.NUMBER

    def test_non_string_key_rejected(self):
        with pytest.raises(ValidationError):
            JSONValue.from_python({1: "a"})

    def test_unsupported_type_rejected(self):
        with pytest.raises(ValidationError, match="set"):
            JSONValue.from_python({"a": {1, 2}})


# =============================================================================
# Access and conversion
# =============================================================================


class TestAccess:
    def test_nested_round_trip_preserves_structure(self):
        text = '{"a":[1,true,null,"x"],"b":{}}'
        value = JSONValue.loads(text)
        assert value.to_python() == {"a": [1, True, None, "x"], "b": {}}
        assert value.dumps() == text

    def test_immutable(self):
        value = JSONValue.from_python({"a": 1})
        with pytest.raises(TypeError):
            value.value["b"] = JSONValue.from_python(2)

    def test_equality_is_structural(self):
        assert JSONValue.from_python([1, {"a": None}]) == JSONValue.from_python([1, {"a": None}])
        assert JSONValue.from_python(1) != JSONValue.from_python(True)

    def test_indexing(self):
        value = JSONValue.from_python({"list": ["x", "y"]})
        assert value["list"][1].value == "y"
        assert len(value["list"]) == 2
        with pytest.raises(TypeError):
            value[0]

    def test_get_on_non_object(self):
        assert JSONValue.from_python([1]).get("a") is None

    @pytest.mark.parametrize(("obj", "empty"), [(None, True), ([], True), ({}, True), ([0], False), ("", False)])
    def test_is_empty(self, obj, empty):
        assert JSONValue.from_python(obj).is_empty is empty


class TestNormalizeMapping:
    def test_none_is_empty_object(self):
        assert normalize_mapping(None) == {}

    def test_tuples_become_lists(self):
        assert normalize_mapping({"a": (1, 2)}) == {"a": [1, 2]}

    def test_non_object_rejected(self):
        with pytest.raises(ValidationError):
            normalize_mapping([1, 2])  # type: ignore[arg-type]
