from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

MIN_PROPERTY_OCCURRENCES = 5
HIGH_CARDINALITY_MIN_SAMPLE = 20
HIGH_CARDINALITY_UNIQUENESS = 0.9
MAX_CHART_VALUES = 6


class ThresholdsConfig(BaseModel):
    min_property_occurrences: int = Field(default=MIN_PROPERTY_OCCURRENCES, ge=1)
    high_cardinality_min_sample: int = Field(default=HIGH_CARDINALITY_MIN_SAMPLE, ge=0)
    high_cardinality_uniqueness: float = Field(default=HIGH_CARDINALITY_UNIQUENESS, gt=0, le=1)
    max_chart_values: int = Field(default=MAX_CHART_VALUES, ge=1)


class SelectionConfig(BaseModel):
    timestamp_column: str = "Timestamp"
    value_expression: str = "Duration"


class InputConfig(BaseModel):
    column_meta_path: str | None = None


class OutputsConfig(BaseModel):
    tables_format: Literal["csv", "parquet"] = "csv"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    input: InputConfig = Field(default_factory=InputConfig)
    outputs: OutputsConfig = Field(default_factory=OutputsConfig)


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    config.input.column_meta_path = _resolve_optional_path(
        config.input.column_meta_path,
        base_dir,
    ) or os.getenv("OUTLIER_DELTA_COLUMN_META")
    return config
