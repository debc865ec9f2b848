"""
Tests for JSON extraction, record paths and line-delimited recovery.
"""
from lingovault.extract.json_records import parse_json_lines, parse_json_records


def test_array_keeps_only_objects():
    records = parse_json_records('[{"w": "a"}, 1, "x", null, [], {"w": "b"}]')
    assert records == [{"w": "a"}, {"w": "b"}]


def test_single_object_is_one_record():
    assert parse_json_records('{"w": "a", "m": "啊"}') == [{"w": "a", "m": "啊"}]


def test_top_level_scalar_gives_nothing():
    assert parse_json_records("42") == []
    assert parse_json_records('"text"') == []


def test_record_path_selects_container():
    raw = '{"data": {"items": [{"w": "a"}, {"w": "b"}]}, "meta": {"count": 2}}'
    assert parse_json_records(raw, "data.items") == [{"w": "a"}, {"w": "b"}]


def test_record_path_to_single_object():
    raw = '{"data": {"entry": {"w": "a"}}}'
    assert parse_json_records(raw, "data.entry") == [{"w": "a"}]


def test_missing_record_path_gives_nothing():
    assert parse_json_records('{"data": []}', "data.items") == []


def test_json_lines_recovery_drops_bad_lines():
    raw = '{"w": "apple"}\n{"w": "pear"}\n{"w": broken'
    assert parse_json_records(raw) == [{"w": "apple"}, {"w": "pear"}]


def test_json_lines_skips_blank_and_non_object_lines():
    raw = '\n[1, 2]\n{"w": "a"}\n\n"str"\r\n{"w": "b"}\n'
    assert parse_json_lines(raw) == [{"w": "a"}, {"w": "b"}]


def test_garbage_gives_nothing():
    assert parse_json_records("not json at all") == []
    assert parse_json_records("") == []


def test_deeply_nested_input_gives_nothing():
    assert parse_json_records("[" * 100000 + "]" * 100000) == []


def test_deeply_nested_line_is_dropped():
    raw = '{"w": "apple"}\n' + "[" * 100000 + "]" * 100000 + '\n{"w": "pear"}'
    assert parse_json_lines(raw) == [{"w": "apple"}, {"w": "pear"}]
