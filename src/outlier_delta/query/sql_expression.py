from __future__ import annotations

import re
from collections.abc import Sequence

from outlier_delta.io.schema import ColumnDescriptor, array_element_type, is_map_type


def flattened_key_to_sql_expression(key: str, column_meta: Sequence[ColumnDescriptor]) -> str:
    """Convert a flattened property path into a map-access SQL expression.

    ``ResourceAttributes.service.name`` -> ``ResourceAttributes['service.name']``
    ``Events.Attributes[0].message.type`` -> ``Events.Attributes[1]['message.type']``

    Array indexes are shifted from 0-based to 1-based. Columns are checked in
    ``column_meta`` order and the first match wins. Keys that match no map
    column are returned unchanged.
    """
    for column in column_meta:
        if is_map_type(column.type):
            prefix = f"{column.name}."
            if key.startswith(prefix):
                return f"{column.name}['{key[len(prefix):]}']"
            continue

        element_type = array_element_type(column.type)
        if element_type is not None and is_map_type(element_type):
            match = re.match(rf"^{re.escape(column.name)}\[(\d+)\]\.(.+)$", key)
            if match:
                index = int(match.group(1)) + 1
                return f"{column.name}[{index}]['{match.group(2)}']"
    return key
