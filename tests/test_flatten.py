from __future__ import annotations

import pytest

from outlier_delta.features.flatten import flatten_record, is_scalar, stringify_value


def test_flatten_record_builds_dotted_and_bracketed_paths() -> None:
    record = {
        "Timestamp": "2026-02-01 12:00:00",
        "SpanAttributes": {"http.method": "GET", "http.status_code": 200},
        "Events": {
            "Name": ["start", "end"],
            "Attributes": [{"key": "a"}, {"key": "b", "extra": {"deep": True}}],
        },
    }

    flat = flatten_record(record)

    assert flat == {
        "Timestamp": "2026-02-01 12:00:00",
        "SpanAttributes.http.method": "GET",
        "SpanAttributes.http.status_code": 200,
        "Events.Name[0]": "start",
        "Events.Name[1]": "end",
        "Events.Attributes[0].key": "a",
        "Events.Attributes[1].key": "b",
        "Events.Attributes[1].extra.deep": True,
    }


def test_flatten_record_keeps_empty_containers_as_placeholders() -> None:
    flat = flatten_record({"Links": [], "Attrs": {}, "Nested": {"inner": []}})

    assert flat == {"Links": [], "Attrs": {}, "Nested.inner": []}
    assert not any(is_scalar(value) for value in flat.values())


def test_flatten_record_handles_empty_root_and_null_values() -> None:
    assert flatten_record({}) == {}
    assert flatten_record({"a": None}) == {"a": None}


def test_flatten_record_never_repeats_paths_and_emits_only_scalars_or_placeholders() -> None:
    record = {"a": [[1, 2], [3]], "b": {"c": [{"d": []}, {}]}, "e": "x"}

    flat = flatten_record(record)

    assert len(flat) == len(set(flat))
    assert flat["a[0][1]"] == 2
    assert flat["b.c[0].d"] == []
    assert flat["b.c[1]"] == {}
    for value in flat.values():
        assert is_scalar(value) or value in ([], {})


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "null"),
        (True, "true"),
        (False, "false"),
        (200, "200"),
        (200.0, "200"),
        (1.5, "1.5"),
        ("GET", "GET"),
    ],
)
def test_stringify_value_collapses_equivalent_scalars(value: object, expected: str) -> None:
    assert stringify_value(value) == expected
