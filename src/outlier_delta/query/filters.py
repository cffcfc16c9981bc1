from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Literal

from outlier_delta.io.schema import ColumnDescriptor, coerce_column_meta
from outlier_delta.query.sql_expression import flattened_key_to_sql_expression

FilterAction = Literal["only", "exclude", "include"]
AddFilterFn = Callable[[str, str, FilterAction | None], None]

ALLOWED_FILTER_ACTIONS = frozenset({"only", "exclude", "include"})


class FilterRequestHandler:
    """Forward chart filter clicks with the property rewritten as a SQL expression."""

    def __init__(
        self,
        column_meta: Iterable[ColumnDescriptor | Mapping[str, Any]] | None,
        on_add_filter: AddFilterFn,
        on_clear_selection: Callable[[], None] | None = None,
    ) -> None:
        self.column_meta = coerce_column_meta(column_meta)
        self.on_add_filter = on_add_filter
        self.on_clear_selection = on_clear_selection

    def __call__(
        self,
        property_path: str,
        value: str,
        action: FilterAction | None = None,
        *,
        is_other: bool = False,
    ) -> None:
        if action is not None and action not in ALLOWED_FILTER_ACTIONS:
            raise ValueError(f"Unsupported filter action: {action}")
        if is_other:
            return
        expression = flattened_key_to_sql_expression(property_path, self.column_meta)
        self.on_add_filter(expression, value, action)
        # A new filter returns the chart to all-rows mode.
        if self.on_clear_selection is not None:
            self.on_clear_selection()
