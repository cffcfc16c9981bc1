from __future__ import annotations

from collections.abc import Mapping, Sequence

from outlier_delta.config import HIGH_CARDINALITY_MIN_SAMPLE, HIGH_CARDINALITY_UNIQUENESS
from outlier_delta.features.statistics import PropertyStatistics
from outlier_delta.io.schema import ColumnDescriptor
from outlier_delta.ranking.classify import FieldVisibility, classify_property
from outlier_delta.report.chart_rows import merge_value_rows

ValueDistribution = Mapping[str, Mapping[str, float]]


def candidate_properties(
    outlier_distribution: ValueDistribution,
    inlier_distribution: ValueDistribution,
) -> list[str]:
    """Outlier properties, or the inlier properties when no outliers matched."""
    candidates = list(outlier_distribution)
    if not candidates:
        candidates = list(inlier_distribution)
    return candidates


def max_value_delta(
    outlier_values: Mapping[str, float],
    inlier_values: Mapping[str, float],
) -> float:
    merged = merge_value_rows(outlier_values, inlier_values)
    return max((abs(row.outlier_count - row.inlier_count) for row in merged), default=0.0)


def property_deltas(
    outlier_distribution: ValueDistribution,
    inlier_distribution: ValueDistribution,
) -> dict[str, float]:
    return {
        property_path: max_value_delta(
            outlier_distribution.get(property_path, {}),
            inlier_distribution.get(property_path, {}),
        )
        for property_path in candidate_properties(outlier_distribution, inlier_distribution)
    }


def order_by_delta(deltas: Mapping[str, float]) -> list[str]:
    """Property paths sorted by descending delta; ties keep mapping order."""
    return sorted(deltas, key=lambda property_path: deltas[property_path], reverse=True)


def rank_properties(
    outlier_distribution: ValueDistribution,
    inlier_distribution: ValueDistribution,
) -> list[str]:
    """Order properties by their largest outlier/inlier percentage gap.

    Ties keep first-seen order.
    """
    return order_by_delta(property_deltas(outlier_distribution, inlier_distribution))


def partition_properties(
    sorted_properties: Sequence[str],
    column_meta: Sequence[ColumnDescriptor],
    outlier_stats: PropertyStatistics,
    inlier_stats: PropertyStatistics,
    *,
    min_sample: int = HIGH_CARDINALITY_MIN_SAMPLE,
    uniqueness_threshold: float = HIGH_CARDINALITY_UNIQUENESS,
) -> tuple[list[str], list[str], dict[str, FieldVisibility]]:
    visible: list[str] = []
    hidden: list[str] = []
    classifications: dict[str, FieldVisibility] = {}
    for property_path in sorted_properties:
        visibility = classify_property(
            property_path,
            column_meta,
            outlier_stats,
            inlier_stats,
            min_sample=min_sample,
            uniqueness_threshold=uniqueness_threshold,
        )
        classifications[property_path] = visibility
        if visibility == "visible":
            visible.append(property_path)
        else:
            hidden.append(property_path)
    return visible, hidden, classifications
