from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from outlier_delta.config import MAX_CHART_VALUES


@dataclass(frozen=True)
class MergedValueRow:
    name: str
    outlier_count: float
    inlier_count: float
    is_other: bool = False

    @property
    def combined_count(self) -> float:
        return self.outlier_count + self.inlier_count


@dataclass(frozen=True)
class ValueDetail:
    value: str
    outlier_count: float
    inlier_count: float
    outlier_share: float | None
    inlier_share: float | None


def merge_value_rows(
    outlier_values: Mapping[str, float],
    inlier_values: Mapping[str, float],
) -> list[MergedValueRow]:
    """One row per distinct value of either group, ordered by value name."""
    names = sorted(set(outlier_values) | set(inlier_values))
    return [
        MergedValueRow(
            name=name,
            outlier_count=float(outlier_values.get(name, 0.0)),
            inlier_count=float(inlier_values.get(name, 0.0)),
        )
        for name in names
    ]


def apply_top_n_aggregation(
    rows: Sequence[MergedValueRow],
    max_values: int = MAX_CHART_VALUES,
) -> list[MergedValueRow]:
    """Keep the ``max_values`` largest rows and fold the rest into ``Other (N)``."""
    if len(rows) <= max_values:
        return list(rows)

    ranked = sorted(rows, key=lambda row: row.combined_count, reverse=True)
    top = ranked[:max_values]
    rest = ranked[max_values:]
    other = MergedValueRow(
        name=f"Other ({len(rest)})",
        outlier_count=sum(row.outlier_count for row in rest),
        inlier_count=sum(row.inlier_count for row in rest),
        is_other=True,
    )
    return [*top, other]


def _share(figure: float, total: float) -> float | None:
    if total <= 0:
        return None
    return figure / total * 100.0


def value_detail(
    value: str,
    outlier_values: Mapping[str, float],
    inlier_values: Mapping[str, float],
) -> ValueDetail:
    outlier_count = float(outlier_values.get(value, 0.0))
    inlier_count = float(inlier_values.get(value, 0.0))
    return ValueDetail(
        value=value,
        outlier_count=outlier_count,
        inlier_count=inlier_count,
        outlier_share=_share(outlier_count, float(sum(outlier_values.values()))),
        inlier_share=_share(inlier_count, float(sum(inlier_values.values()))),
    )
