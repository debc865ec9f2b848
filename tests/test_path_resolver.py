"""
Tests for dot/array-index path expressions (lingovault.plan.path).
"""
import pytest

from lingovault.plan.path import EMPTY_PATH, Index, Key, parse_path, resolve, resolve_path


DOC = {
    "data": {
        "items": [
            {"w": "cat", "m": "猫", "n": 3},
            {"w": "dog", "m": None},
        ],
    },
    "0": "zero",
    "flag": True,
    "ratio": 2.0,
    "tags": ["n.", "v."],
    "nested": {"a": 1},
    "word": "plain",
}


class TestParsePath:
    def test_segments_are_parsed_once(self):
        expr = parse_path("data.items.0.w")
        assert expr.segments == (Key("data"), Key("items"), Index(0, "0"), Key("w"))
        assert expr.text == "data.items.0.w"

    def test_blank_segments_and_whitespace_are_dropped(self):
        assert parse_path(" data . . items ").segments == (Key("data"), Key("items"))

    @pytest.mark.parametrize("path", [None, "", "   ", ".", "..", 5, ["a"]])
    def test_empty_or_non_string_path(self, path):
        assert parse_path(path) == EMPTY_PATH
        assert not parse_path(path)

    def test_negative_number_is_a_key(self):
        assert parse_path("-1").segments == (Key("-1"),)


class TestResolve:
    def test_object_keys(self):
        assert resolve(DOC, "word") == "plain"

    def test_array_index(self):
        assert resolve(DOC, "data.items.1.w") == "dog"

    def test_numeric_segment_on_mapping_is_a_key_lookup(self):
        assert resolve(DOC, "0") == "zero"

    def test_out_of_range_index(self):
        assert resolve(DOC, "data.items.5.w") == ""

    def test_key_segment_on_list(self):
        assert resolve(DOC, "data.items.w") == ""

    def test_negative_index_on_list(self):
        assert resolve(DOC, "data.items.-1") == ""

    def test_missing_key(self):
        assert resolve(DOC, "data.missing.w") == ""

    def test_traversal_through_null(self):
        assert resolve(DOC, "data.items.1.m.x") == ""
        assert resolve(DOC, "data.items.1.m") == ""

    def test_traversal_through_primitive(self):
        assert resolve(DOC, "word.length") == ""
        assert resolve(DOC, "data.items.0.n.x") == ""

    def test_empty_path_gives_empty_string(self):
        assert resolve(DOC, None) == ""
        assert resolve(DOC, "") == ""

    def test_pre_parsed_expression(self):
        expr = parse_path("data.items.0.m")
        assert resolve(DOC, expr) == "猫"
        assert expr.resolve(DOC) == "猫"

    def test_scalar_coercion(self):
        assert resolve(DOC, "data.items.0.n") == "3"
        assert resolve(DOC, "flag") == "true"
        assert resolve(DOC, "ratio") == "2"

    def test_list_coerces_to_comma_joined_string(self):
        assert resolve(DOC, "tags") == "n.,v."

    def test_object_coerces_to_json(self):
        assert resolve(DOC, "nested") == '{"a": 1}'

    def test_resolve_path_returns_raw_value(self):
        assert resolve_path(DOC, "data.items") == DOC["data"]["items"]
        assert resolve_path(DOC, "data.nope") == ""


VALUES = [None, 0, 1.5, "text", [], {}, [1, [2, 3]], {"a": [{"b": None}]}, DOC, True]
PATHS = [None, "", ".", "a", "0", "a.0.b", "..", "-1", "a.b.c.d", "data.items.0.w", 5, "1.1"]


@pytest.mark.parametrize("value", VALUES)
@pytest.mark.parametrize("path", PATHS)
def test_resolve_never_raises(value, path):
    assert isinstance(resolve(value, path), str)
