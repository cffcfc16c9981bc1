from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from outlier_delta.config import MIN_PROPERTY_OCCURRENCES
from outlier_delta.features.flatten import FlatRecord, flatten_record, is_scalar, stringify_value

ValueDistribution = dict[str, dict[str, float]]


@dataclass(frozen=True)
class PropertyStatistics:
    """Per-group property counts and value percentages.

    ``value_distribution`` percentages are relative to the records that contain
    the property, not to the whole group.
    """

    property_occurrences: dict[str, int] = field(default_factory=dict)
    value_distribution: ValueDistribution = field(default_factory=dict)
    record_count: int = 0

    def occurrences(self, property_path: str) -> int:
        return int(self.property_occurrences.get(property_path, 0))

    def values(self, property_path: str) -> dict[str, float]:
        return self.value_distribution.get(property_path, {})


def _long_frame(records: list[FlatRecord]) -> pd.DataFrame:
    rows = [
        (index, key, stringify_value(value) if is_scalar(value) else None)
        for index, record in enumerate(records)
        for key, value in record.items()
    ]
    return pd.DataFrame(rows, columns=["record_index", "property", "value_key"])


def compute_property_statistics(
    records: Iterable[FlatRecord],
    min_property_occurrences: int = MIN_PROPERTY_OCCURRENCES,
) -> PropertyStatistics:
    """Count property occurrences and value percentages for flattened records.

    Only properties seen in at least ``min_property_occurrences`` records get a
    value table. Empty-container placeholders count as occurrences but never as
    values.
    """
    flat_records = list(records)
    if not flat_records:
        return PropertyStatistics()

    long = _long_frame(flat_records)
    if long.empty:
        return PropertyStatistics(record_count=len(flat_records))

    occurrences = long.groupby("property", sort=False).size()
    property_occurrences = {str(key): int(count) for key, count in occurrences.items()}

    common = occurrences[occurrences >= int(min_property_occurrences)].index
    values = long[long["property"].isin(common)].dropna(subset=["value_key"])

    value_distribution: ValueDistribution = {}
    if not values.empty:
        value_counts = values.groupby(["property", "value_key"], sort=False).size()
        for (property_path, value_key), count in value_counts.items():
            total = property_occurrences[property_path]
            value_distribution.setdefault(property_path, {})[value_key] = (
                float(count) / float(total) * 100.0
            )

    return PropertyStatistics(
        property_occurrences=property_occurrences,
        value_distribution=value_distribution,
        record_count=len(flat_records),
    )


def compute_row_statistics(
    rows: Iterable[Mapping[str, Any]],
    min_property_occurrences: int = MIN_PROPERTY_OCCURRENCES,
) -> PropertyStatistics:
    return compute_property_statistics(
        (flatten_record(row) for row in rows),
        min_property_occurrences=min_property_occurrences,
    )
