from __future__ import annotations

from datetime import datetime

import pytest

from outlier_delta.pipeline.selection import (
    SelectionBox,
    matching_timestamps,
    partition_rows,
    timestamp_to_number,
)


def test_partition_rows_splits_by_inclusive_box() -> None:
    rows = [
        {"Timestamp": 100, "Duration": 5_000_000, "id": "inside"},
        {"Timestamp": 200, "Duration": 9_000_000, "id": "edge"},
        {"Timestamp": 300, "Duration": 5_000_000, "id": "late"},
        {"Timestamp": 150, "Duration": 1_000_000, "id": "fast"},
    ]
    box = SelectionBox(x_min=100, x_max=200, y_min=4, y_max=9)

    outliers, inliers = partition_rows(rows, box, "Timestamp", "(Duration)/1e6")

    assert [row["id"] for row in outliers] == ["inside", "edge"]
    assert [row["id"] for row in inliers] == ["late", "fast"]


def test_partition_rows_drops_rows_without_usable_coordinates() -> None:
    rows = [
        {"Timestamp": 100, "Duration": 5},
        {"Timestamp": None, "Duration": 5},
        {"Timestamp": 100, "Duration": "slow"},
        {"Duration": 5},
    ]

    outliers, inliers = partition_rows(rows, SelectionBox(0, 1000, 0, 10), "Timestamp", "Duration")

    assert len(outliers) == 1
    assert inliers == []


def test_partition_rows_with_unparseable_expression_drops_everything() -> None:
    rows = [{"Timestamp": 1, "Duration": 1}]

    outliers, inliers = partition_rows(rows, SelectionBox(0, 10, 0, 10), "Timestamp", "count()")

    assert outliers == []
    assert inliers == []


def test_timestamp_to_number_converts_datetimes_to_epoch_millis() -> None:
    assert timestamp_to_number(1_700_000_000_000) == 1_700_000_000_000.0
    assert timestamp_to_number("1700000000000") == 1_700_000_000_000.0
    assert timestamp_to_number("1970-01-01 00:00:01") == pytest.approx(1000.0)
    assert timestamp_to_number("1970-01-01T00:00:01.500Z") == pytest.approx(1500.0)
    assert timestamp_to_number("not a timestamp") is None
    assert timestamp_to_number(None) is None


def test_matching_timestamps_follows_flattened_paths() -> None:
    rows = [
        {"Timestamp": "t1", "SpanAttributes": {"http.method": "GET"}},
        {"Timestamp": "t2", "SpanAttributes": {"http.method": "POST"}},
        {"Timestamp": "t3", "SpanAttributes": {"http.method": "GET"}},
        {"Timestamp": "t4", "Events": {"Name": ["GET"]}},
        {"Timestamp": "t5", "SpanAttributes": {"http.status_code": 200}},
    ]

    assert matching_timestamps(rows, "SpanAttributes.http.method", "GET", "Timestamp") == [
        "t1",
        "t3",
    ]
    assert matching_timestamps(rows, "Events.Name[0]", "GET", "Timestamp") == ["t4"]
    assert matching_timestamps(rows, "SpanAttributes.http.status_code", "200", "Timestamp") == [
        "t5"
    ]
    assert matching_timestamps(rows, "Missing", "x", "Timestamp") == []


@pytest.mark.parametrize("value", ["now", "today", "yesterday", " now ", "01/02/2026", "2026"])
def test_timestamp_to_number_rejects_relative_and_loose_strings(value: str) -> None:
    assert timestamp_to_number(value) is None


def test_timestamp_to_number_accepts_datetime_objects() -> None:
    assert timestamp_to_number(datetime(1970, 1, 1, 0, 0, 2)) == pytest.approx(2000.0)
    assert timestamp_to_number("1970-01-01 00:00:01+01:00") == pytest.approx(-3_599_000.0)
    assert timestamp_to_number(object()) is None


def test_partition_rows_drops_rows_with_relative_timestamps() -> None:
    rows = [{"Timestamp": "now", "Duration": 5}, {"Timestamp": "1970-01-01", "Duration": 5}]

    outliers, inliers = partition_rows(
        rows, SelectionBox(-1, 2e12, 0, 10), "Timestamp", "Duration"
    )

    assert outliers == [{"Timestamp": "1970-01-01", "Duration": 5}]
    assert inliers == []
