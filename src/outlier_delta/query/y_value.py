from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

COLUMN_PATTERN = r"[A-Za-z_][\w.]*"
NUMBER_PATTERN = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"
NUMBER_RE = re.compile(NUMBER_PATTERN)
EXPRESSION_RE = re.compile(
    rf"^\s*(?:\(\s*(?P<wrapped>{COLUMN_PATTERN})\s*\)|(?P<bare>{COLUMN_PATTERN}))"
    rf"\s*(?:(?P<operator>[/*])\s*(?P<literal>{NUMBER_PATTERN}))?\s*$"
)


def coerce_number(value: Any) -> float | None:
    """Finite float from a number or numeric string, else ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if NUMBER_RE.fullmatch(text) is None:
            return None
        number = float(text)
    else:
        return None
    return number if math.isfinite(number) else None


def compute_y_value(expression: str, row: Mapping[str, Any]) -> float | None:
    """Evaluate ``Col``, ``(Col)``, ``Col / N`` or ``Col * N`` against a row.

    Anything else, a missing column, or division by zero yields ``None``.
    """
    match = EXPRESSION_RE.match(expression or "")
    if match is None:
        return None

    column = match.group("wrapped") or match.group("bare")
    if column not in row:
        return None
    value = coerce_number(row[column])
    if value is None:
        return None

    operator = match.group("operator")
    if operator is None:
        return value
    literal = float(match.group("literal"))
    if operator == "/":
        if literal == 0:
            return None
        result = value / literal
    else:
        result = value * literal
    return result if math.isfinite(result) else None
