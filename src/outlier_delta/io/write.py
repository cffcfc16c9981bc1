from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pandas as pd

TABLE_FORMATS = ("csv", "parquet")


def write_table(df: pd.DataFrame, path: Path, fmt: str = "csv") -> Path:
    if fmt not in TABLE_FORMATS:
        raise ValueError(f"Unsupported table format: {fmt}")
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "parquet":
        df.to_parquet(path, index=False)
    else:
        df.to_csv(path, index=False)
    return path


def write_tables(
    tables: Mapping[str, pd.DataFrame], directory: Path, fmt: str = "csv"
) -> dict[str, Path]:
    """Write each table as ``<directory>/<name>.<fmt>``."""
    return {
        name: write_table(table, directory / f"{name}.{fmt}", fmt=fmt)
        for name, table in tables.items()
    }


def write_summary(data: dict[str, Any], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    # numpy scalars from pandas aggregations are not JSON-native.
    path.write_text(json.dumps(data, indent=2, sort_keys=True, default=float), encoding="utf-8")
    return path
