from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import numpy as np
import pandas as pd

from outlier_delta.features.flatten import flatten_record, is_scalar, stringify_value
from outlier_delta.query.y_value import coerce_number, compute_y_value

LOGGER = logging.getLogger(__name__)

DATETIME_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?)?"
    r"(?:Z|[+-]\d{2}:?\d{2})?"
)


@dataclass(frozen=True)
class SelectionBox:
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    def contains(self, x: float, y: float) -> bool:
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max


def timestamp_to_number(value: Any) -> float | None:
    """Numbers pass through; datetime strings become epoch milliseconds (naive = UTC).

    Strings must be ISO-8601 or ClickHouse ``YYYY-MM-DD hh:mm:ss[.fff]`` datetimes.
    """
    number = coerce_number(value)
    if number is not None:
        return number
    if isinstance(value, str):
        if DATETIME_RE.fullmatch(value.strip()) is None:
            return None
        value = value.strip()
    elif not isinstance(value, (datetime, date, np.datetime64)):
        return None
    try:
        timestamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(timestamp):
        return None
    return timestamp.value / 1_000_000.0


def partition_rows(
    rows: Iterable[Mapping[str, Any]],
    box: SelectionBox,
    timestamp_column: str,
    value_expression: str,
) -> tuple[list[Mapping[str, Any]], list[Mapping[str, Any]]]:
    """Split rows into (outliers, inliers) by the selection box.

    Rows whose x or y cannot be computed land in neither group.
    """
    outliers: list[Mapping[str, Any]] = []
    inliers: list[Mapping[str, Any]] = []
    dropped = 0
    for row in rows:
        x = timestamp_to_number(row.get(timestamp_column))
        y = compute_y_value(value_expression, row)
        if x is None or y is None:
            dropped += 1
            continue
        if box.contains(x, y):
            outliers.append(row)
        else:
            inliers.append(row)

    if dropped:
        LOGGER.info(
            "Dropped %d rows without a usable %s or value expression %r",
            dropped,
            timestamp_column,
            value_expression,
        )
    return outliers, inliers


def matching_timestamps(
    rows: Iterable[Mapping[str, Any]],
    property_path: str,
    value: str,
    timestamp_column: str,
) -> list[Any]:
    """Timestamps of rows whose flattened ``property_path`` equals ``value``."""
    matches: list[Any] = []
    for row in rows:
        flat = flatten_record(row)
        if property_path not in flat:
            continue
        candidate = flat[property_path]
        if is_scalar(candidate) and stringify_value(candidate) == value:
            matches.append(row.get(timestamp_column))
    return matches
