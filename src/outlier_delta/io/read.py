from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from outlier_delta.io.schema import ColumnDescriptor, coerce_column_meta

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultSet:
    rows: list[dict[str, Any]] = field(default_factory=list)
    column_meta: list[ColumnDescriptor] = field(default_factory=list)


def _validate_rows(rows: Any, path: Path) -> list[dict[str, Any]]:
    if not isinstance(rows, list):
        raise ValueError(f"Result set 'data' must be a list: {path}")
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValueError(f"Row {index} in {path} is not an object")
    return rows


def _read_json_lines(path: Path) -> list[Any]:
    rows: list[Any] = []
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            text = line.strip()
            if text:
                rows.append(json.loads(text))
    return rows


def load_column_meta(path: Path) -> list[ColumnDescriptor]:
    """Read ``[{"name", "type"}, ...]`` or a document carrying a ``meta`` list."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("meta", [])
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise ValueError(f"Column metadata must be a list of objects: {path}")
    return coerce_column_meta(payload)


def load_result_set(
    path: Path,
    column_meta: list[ColumnDescriptor] | None = None,
) -> ResultSet:
    """Load rows from a ``{"meta": [...], "data": [...]}`` JSON document or JSON Lines."""
    suffix = path.suffix.lower()
    if suffix in {".jsonl", ".ndjson"}:
        rows = _validate_rows(_read_json_lines(path), path)
        meta: list[ColumnDescriptor] = []
    elif suffix == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(payload, list):
            payload = {"data": payload}
        if not isinstance(payload, dict) or "data" not in payload:
            raise ValueError(f"Result set document must contain a 'data' list: {path}")
        rows = _validate_rows(payload["data"], path)
        meta = coerce_column_meta(payload.get("meta"))
    else:
        raise ValueError(f"Unsupported result set file type: {path.suffix}")

    LOGGER.info("Loaded %d rows from %s", len(rows), path)
    return ResultSet(rows=rows, column_meta=list(column_meta) if column_meta else meta)
