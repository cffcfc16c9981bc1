from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

TYPE_WRAPPERS = ("LowCardinality(", "Nullable(")


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    type: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ColumnDescriptor:
        return cls(name=str(data.get("name", "")), type=str(data.get("type", "")))


def coerce_column_meta(
    columns: Iterable[ColumnDescriptor | Mapping[str, Any]] | None,
) -> list[ColumnDescriptor]:
    """Accept descriptors or ``{"name", "type"}`` mappings and return descriptors."""
    if not columns:
        return []
    return [
        column if isinstance(column, ColumnDescriptor) else ColumnDescriptor.from_mapping(column)
        for column in columns
    ]


def strip_type_wrappers(type_name: str) -> str:
    """Remove any nesting of ``LowCardinality(...)`` and ``Nullable(...)`` wrappers."""
    text = type_name.strip()
    changed = True
    while changed:
        changed = False
        for wrapper in TYPE_WRAPPERS:
            if text.startswith(wrapper) and text.endswith(")"):
                text = text[len(wrapper) : -1].strip()
                changed = True
                break
    return text


def array_element_type(type_name: str) -> str | None:
    """Return the unwrapped element type of an ``Array(T)`` type, else ``None``."""
    base = strip_type_wrappers(type_name)
    if not (base.startswith("Array(") and base.endswith(")")):
        return None
    return strip_type_wrappers(base[len("Array(") : -1])


def is_map_type(type_name: str) -> bool:
    base = strip_type_wrappers(type_name)
    return base.startswith("Map(") and base.endswith(")")


def is_datetime64_type(type_name: str) -> bool:
    base = strip_type_wrappers(type_name)
    return base.startswith("DateTime64(") and base.endswith(")")


def find_column(columns: Iterable[ColumnDescriptor], name: str) -> ColumnDescriptor | None:
    for column in columns:
        if column.name == name:
            return column
    return None
