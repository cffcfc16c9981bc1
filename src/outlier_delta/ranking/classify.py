from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Literal

from outlier_delta.config import HIGH_CARDINALITY_MIN_SAMPLE, HIGH_CARDINALITY_UNIQUENESS
from outlier_delta.features.statistics import PropertyStatistics
from outlier_delta.io.schema import (
    ColumnDescriptor,
    array_element_type,
    find_column,
    is_datetime64_type,
    strip_type_wrappers,
)

FieldVisibility = Literal["visible", "hidden-denylist", "hidden-high-cardinality"]

ARRAY_ELEMENT_RE = re.compile(r"^([^\[]+)\[(\d+)\]$")
ID_SUFFIX_RE = re.compile(r"(Id|ID)$")


def _base_column_name(property_path: str) -> str | None:
    """``Col[3]`` -> ``Col``; ``Col`` -> ``Col``; ``Col[0].sub`` -> ``None``."""
    match = ARRAY_ELEMENT_RE.match(property_path)
    if match:
        return match.group(1)
    if "[" in property_path:
        return None
    return property_path


def _resolve_column(
    property_path: str,
    column_meta: Sequence[ColumnDescriptor],
) -> ColumnDescriptor | None:
    column_name = _base_column_name(property_path)
    if column_name is None:
        return None
    return find_column(column_meta, column_name)


def is_id_field(property_path: str, column_meta: Sequence[ColumnDescriptor]) -> bool:
    """True for ``...Id``/``...ID`` columns of type String or Array(String)."""
    column_name = _base_column_name(property_path)
    if column_name is None or not ID_SUFFIX_RE.search(column_name):
        return False
    column = find_column(column_meta, column_name)
    if column is None:
        return False
    if strip_type_wrappers(column.type) == "String":
        return True
    return array_element_type(column.type) == "String"


def is_timestamp_array_field(
    property_path: str,
    column_meta: Sequence[ColumnDescriptor],
) -> bool:
    """True for elements of (or the bare reference to) an Array(DateTime64(...)) column."""
    column = _resolve_column(property_path, column_meta)
    if column is None:
        return False
    element_type = array_element_type(column.type)
    return element_type is not None and is_datetime64_type(element_type)


def is_denylisted(property_path: str, column_meta: Sequence[ColumnDescriptor]) -> bool:
    return is_id_field(property_path, column_meta) or is_timestamp_array_field(
        property_path, column_meta
    )


def _uniqueness(distinct_values: int, total: int) -> float | None:
    if total <= 0:
        return None
    return distinct_values / total


def is_high_cardinality(
    property_path: str,
    outlier_stats: PropertyStatistics,
    inlier_stats: PropertyStatistics,
    *,
    min_sample: int = HIGH_CARDINALITY_MIN_SAMPLE,
    uniqueness_threshold: float = HIGH_CARDINALITY_UNIQUENESS,
) -> bool:
    """Hide a property whose values are nearly all unique in every group that has it.

    The smaller of the two uniqueness ratios is used, so clustering in either
    group keeps the property visible.
    """
    outlier_total = outlier_stats.occurrences(property_path)
    inlier_total = inlier_stats.occurrences(property_path)
    if outlier_total + inlier_total <= min_sample:
        return False

    outlier_uniqueness = _uniqueness(len(outlier_stats.values(property_path)), outlier_total)
    inlier_uniqueness = _uniqueness(len(inlier_stats.values(property_path)), inlier_total)
    defined = [value for value in (outlier_uniqueness, inlier_uniqueness) if value is not None]
    if not defined:
        return False
    return min(defined) > uniqueness_threshold


def classify_property(
    property_path: str,
    column_meta: Sequence[ColumnDescriptor],
    outlier_stats: PropertyStatistics,
    inlier_stats: PropertyStatistics,
    *,
    min_sample: int = HIGH_CARDINALITY_MIN_SAMPLE,
    uniqueness_threshold: float = HIGH_CARDINALITY_UNIQUENESS,
) -> FieldVisibility:
    if is_denylisted(property_path, column_meta):
        return "hidden-denylist"
    if is_high_cardinality(
        property_path,
        outlier_stats,
        inlier_stats,
        min_sample=min_sample,
        uniqueness_threshold=uniqueness_threshold,
    ):
        return "hidden-high-cardinality"
    return "visible"
