from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

FlatRecord = dict[str, Any]


def is_scalar(value: Any) -> bool:
    return not isinstance(value, (Mapping, list, tuple))


def stringify_value(value: Any) -> str:
    """Stringify a scalar so repeated identical values share one bucket."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def flatten_record(record: Any) -> FlatRecord:
    """Flatten nested objects and arrays into ``A.b[0].c`` style paths.

    Empty arrays and objects below the root are kept as ``[]`` / ``{}`` so the
    path still counts as present.
    """
    result: FlatRecord = {}

    def _recurse(current: Any, prefix: str) -> None:
        if isinstance(current, Mapping):
            if not current:
                if prefix:
                    result[prefix] = {}
                return
            for key, value in current.items():
                _recurse(value, f"{prefix}.{key}" if prefix else str(key))
        elif isinstance(current, (list, tuple)):
            if not current:
                result[prefix] = []
                return
            for index, value in enumerate(current):
                _recurse(value, f"{prefix}[{index}]")
        else:
            result[prefix] = current

    _recurse(record, "")
    return result
