from __future__ import annotations

from collections.abc import Mapping

import numpy as np

from outlier_delta.features.statistics import PropertyStatistics, ValueDistribution


def compute_distribution_score(distribution: Mapping[str, float]) -> float:
    """Skew of one distribution: the top percentage minus the mean percentage.

    Uniform and single-value distributions score 0. Percentages need not sum
    to 100.
    """
    if len(distribution) <= 1:
        return 0.0
    percentages = np.asarray(list(distribution.values()), dtype=float)
    return max(float(percentages.max() - percentages.mean()), 0.0)


def all_rows_distribution(
    stats: PropertyStatistics,
    total_rows: int | None = None,
) -> ValueDistribution:
    """Rescale per-property percentages to percentages of every row in the group."""
    total = stats.record_count if total_rows is None else int(total_rows)
    if total <= 0:
        return {}
    rescaled: ValueDistribution = {}
    for property_path, values in stats.value_distribution.items():
        coverage = stats.occurrences(property_path) / total
        rescaled[property_path] = {
            value: percentage * coverage for value, percentage in values.items()
        }
    return rescaled


def rank_by_distribution_score(
    stats: PropertyStatistics,
    total_rows: int | None = None,
) -> list[tuple[str, float]]:
    distribution = all_rows_distribution(stats, total_rows)
    scored = [
        (property_path, compute_distribution_score(values))
        for property_path, values in distribution.items()
    ]
    return sorted(scored, key=lambda item: item[1], reverse=True)
