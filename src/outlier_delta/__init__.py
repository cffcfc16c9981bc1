from importlib.metadata import PackageNotFoundError, version

from outlier_delta.pipeline.compare import DeltaComparison, compare_row_sets
from outlier_delta.query.sql_expression import flattened_key_to_sql_expression
from outlier_delta.query.y_value import compute_y_value

try:
    __version__ = version("outlier-delta")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = [
    "DeltaComparison",
    "__version__",
    "compare_row_sets",
    "compute_y_value",
    "flattened_key_to_sql_expression",
]
