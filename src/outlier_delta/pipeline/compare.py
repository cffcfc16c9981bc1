from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from outlier_delta.config import MAX_CHART_VALUES, AppConfig, ThresholdsConfig
from outlier_delta.features.statistics import PropertyStatistics, compute_row_statistics
from outlier_delta.io.read import ResultSet, load_column_meta, load_result_set
from outlier_delta.io.schema import ColumnDescriptor
from outlier_delta.io.write import write_summary, write_tables
from outlier_delta.paths import build_output_paths
from outlier_delta.pipeline.selection import SelectionBox, partition_rows
from outlier_delta.query.sql_expression import flattened_key_to_sql_expression
from outlier_delta.ranking.classify import FieldVisibility
from outlier_delta.ranking.delta import order_by_delta, partition_properties, property_deltas
from outlier_delta.ranking.scoring import rank_by_distribution_score
from outlier_delta.report.chart_rows import (
    MergedValueRow,
    apply_top_n_aggregation,
    merge_value_rows,
)

LOGGER = logging.getLogger(__name__)

RANKING_COLUMNS = [
    "rank",
    "property",
    "sql_expression",
    "visibility",
    "max_delta",
    "outlier_occurrences",
    "inlier_occurrences",
    "outlier_distinct_values",
    "inlier_distinct_values",
]
VALUE_COLUMNS = ["property", "value", "outlier_pct", "inlier_pct", "is_other"]


@dataclass(frozen=True)
class DeltaComparison:
    outlier_stats: PropertyStatistics
    inlier_stats: PropertyStatistics
    column_meta: list[ColumnDescriptor]
    sorted_properties: list[str]
    visible_properties: list[str]
    hidden_properties: list[str]
    classifications: dict[str, FieldVisibility] = field(default_factory=dict)
    max_deltas: dict[str, float] = field(default_factory=dict)
    max_chart_values: int = MAX_CHART_VALUES

    def chart_rows(self, property_path: str) -> list[MergedValueRow]:
        merged = merge_value_rows(
            self.outlier_stats.values(property_path),
            self.inlier_stats.values(property_path),
        )
        return apply_top_n_aggregation(merged, max_values=self.max_chart_values)

    def to_tables(self) -> dict[str, pd.DataFrame]:
        ranking_rows: list[dict[str, Any]] = []
        value_rows: list[dict[str, Any]] = []
        for rank, property_path in enumerate(self.sorted_properties, start=1):
            ranking_rows.append(
                {
                    "rank": rank,
                    "property": property_path,
                    "sql_expression": flattened_key_to_sql_expression(
                        property_path, self.column_meta
                    ),
                    "visibility": self.classifications.get(property_path, "visible"),
                    "max_delta": self.max_deltas.get(property_path, 0.0),
                    "outlier_occurrences": self.outlier_stats.occurrences(property_path),
                    "inlier_occurrences": self.inlier_stats.occurrences(property_path),
                    "outlier_distinct_values": len(self.outlier_stats.values(property_path)),
                    "inlier_distinct_values": len(self.inlier_stats.values(property_path)),
                }
            )
            for row in self.chart_rows(property_path):
                value_rows.append(
                    {
                        "property": property_path,
                        "value": row.name,
                        "outlier_pct": row.outlier_count,
                        "inlier_pct": row.inlier_count,
                        "is_other": row.is_other,
                    }
                )
        return {
            "property_ranking": pd.DataFrame(ranking_rows, columns=RANKING_COLUMNS),
            "property_values": pd.DataFrame(value_rows, columns=VALUE_COLUMNS),
        }

    def summary(self) -> dict[str, Any]:
        return {
            "n_outlier_rows": self.outlier_stats.record_count,
            "n_inlier_rows": self.inlier_stats.record_count,
            "n_properties": len(self.sorted_properties),
            "visible_properties": list(self.visible_properties),
            "hidden_properties": list(self.hidden_properties),
            "inlier_distribution_scores": [
                {"property": property_path, "score": score}
                for property_path, score in rank_by_distribution_score(self.inlier_stats)[:10]
            ],
        }


def _resolve_column_meta(outliers: ResultSet, inliers: ResultSet) -> list[ColumnDescriptor]:
    return list(outliers.column_meta or inliers.column_meta or [])


def compare_row_sets(
    outliers: ResultSet,
    inliers: ResultSet,
    thresholds: ThresholdsConfig | None = None,
) -> DeltaComparison:
    """Rank and classify the properties that separate outlier rows from inlier rows."""
    limits = thresholds or ThresholdsConfig()
    column_meta = _resolve_column_meta(outliers, inliers)

    outlier_stats = compute_row_statistics(
        outliers.rows, min_property_occurrences=limits.min_property_occurrences
    )
    inlier_stats = compute_row_statistics(
        inliers.rows, min_property_occurrences=limits.min_property_occurrences
    )

    deltas = property_deltas(outlier_stats.value_distribution, inlier_stats.value_distribution)
    sorted_properties = order_by_delta(deltas)
    visible, hidden, classifications = partition_properties(
        sorted_properties,
        column_meta,
        outlier_stats,
        inlier_stats,
        min_sample=limits.high_cardinality_min_sample,
        uniqueness_threshold=limits.high_cardinality_uniqueness,
    )
    LOGGER.info(
        "Compared %d outlier rows with %d inlier rows: %d visible, %d hidden properties",
        outlier_stats.record_count,
        inlier_stats.record_count,
        len(visible),
        len(hidden),
    )
    return DeltaComparison(
        outlier_stats=outlier_stats,
        inlier_stats=inlier_stats,
        column_meta=column_meta,
        sorted_properties=sorted_properties,
        visible_properties=visible,
        hidden_properties=hidden,
        classifications=classifications,
        max_deltas=deltas,
        max_chart_values=limits.max_chart_values,
    )


def _column_meta_override(
    column_meta_path: Path | None,
    config: AppConfig,
) -> list[ColumnDescriptor] | None:
    path = column_meta_path
    if path is None and config.input.column_meta_path:
        path = Path(config.input.column_meta_path)
    return load_column_meta(path) if path is not None else None


def write_comparison(
    comparison: DeltaComparison,
    out_dir: Path,
    config: AppConfig,
) -> dict[str, Path]:
    paths = build_output_paths(out_dir)
    fmt = config.outputs.tables_format
    written = write_tables(comparison.to_tables(), paths.tables, fmt=fmt)
    written["summary"] = write_summary(comparison.summary(), paths.summary / "compare.json")
    return written


def run_compare(
    outliers_path: Path,
    inliers_path: Path,
    out_dir: Path,
    config: AppConfig,
    column_meta_path: Path | None = None,
) -> DeltaComparison:
    column_meta = _column_meta_override(column_meta_path, config)
    outliers = load_result_set(outliers_path, column_meta=column_meta)
    inliers = load_result_set(inliers_path, column_meta=column_meta)
    comparison = compare_row_sets(outliers, inliers, thresholds=config.thresholds)
    write_comparison(comparison, out_dir, config)
    return comparison


def run_select(
    rows_path: Path,
    box: SelectionBox,
    out_dir: Path,
    config: AppConfig,
    column_meta_path: Path | None = None,
) -> DeltaComparison:
    """Split one result set with a selection box, then compare the two halves."""
    column_meta = _column_meta_override(column_meta_path, config)
    result_set = load_result_set(rows_path, column_meta=column_meta)
    outlier_rows, inlier_rows = partition_rows(
        result_set.rows,
        box,
        timestamp_column=config.selection.timestamp_column,
        value_expression=config.selection.value_expression,
    )
    comparison = compare_row_sets(
        ResultSet(rows=[dict(row) for row in outlier_rows], column_meta=result_set.column_meta),
        ResultSet(rows=[dict(row) for row in inlier_rows], column_meta=result_set.column_meta),
        thresholds=config.thresholds,
    )
    write_comparison(comparison, out_dir, config)
    return comparison
