from __future__ import annotations

import json
from pathlib import Path

import typer

from outlier_delta.config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from outlier_delta.io.read import load_column_meta
from outlier_delta.logging import configure_logging
from outlier_delta.pipeline.compare import DeltaComparison, run_compare, run_select
from outlier_delta.pipeline.selection import SelectionBox
from outlier_delta.query.sql_expression import flattened_key_to_sql_expression
from outlier_delta.query.y_value import compute_y_value

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _load_app_config(config_path: Path | None) -> AppConfig:
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return AppConfig()
        config_path = DEFAULT_CONFIG_PATH
    return load_config(config_path)


def _echo_comparison(comparison: DeltaComparison, out: Path) -> None:
    typer.echo(
        "Comparison complete. "
        f"Visible: {len(comparison.visible_properties)}, "
        f"hidden: {len(comparison.hidden_properties)}. Outputs: {out}"
    )
    for property_path in comparison.visible_properties[:10]:
        delta = comparison.max_deltas.get(property_path, 0.0)
        typer.echo(f"  {property_path}\t{delta:.2f}")


@app.command()
def compare(
    outliers: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    inliers: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    columns: Path | None = typer.Option(
        None,
        exists=True,
        readable=True,
        resolve_path=True,
        help="JSON column metadata; overrides the meta embedded in the result sets.",
    ),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Rank the properties that separate outlier rows from inlier rows."""
    configure_logging()
    cfg = _load_app_config(config)
    comparison = run_compare(
        outliers_path=outliers,
        inliers_path=inliers,
        out_dir=out,
        config=cfg,
        column_meta_path=columns,
    )
    _echo_comparison(comparison, out)


@app.command()
def select(
    rows: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
    x_min: float = typer.Option(...),
    x_max: float = typer.Option(...),
    y_min: float = typer.Option(...),
    y_max: float = typer.Option(...),
    columns: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
    out: Path = typer.Option(Path("out"), resolve_path=True),
    config: Path | None = typer.Option(None, exists=True, readable=True, resolve_path=True),
) -> None:
    """Split one result set with a selection box and compare both halves."""
    configure_logging()
    if x_min > x_max or y_min > y_max:
        raise typer.BadParameter("Selection minimums must not exceed maximums.")
    cfg = _load_app_config(config)
    comparison = run_select(
        rows_path=rows,
        box=SelectionBox(x_min=x_min, x_max=x_max, y_min=y_min, y_max=y_max),
        out_dir=out,
        config=cfg,
        column_meta_path=columns,
    )
    _echo_comparison(comparison, out)


@app.command()
def translate(
    key: str = typer.Argument(..., help="Flattened property path, e.g. SpanAttributes.http.method"),
    columns: Path = typer.Option(..., exists=True, readable=True, resolve_path=True),
) -> None:
    """Print the SQL expression for a flattened property path."""
    configure_logging()
    typer.echo(flattened_key_to_sql_expression(key, load_column_meta(columns)))


def _format_number(value: float | None) -> str:
    if value is None:
        return "null"
    if value.is_integer():
        return str(int(value))
    return repr(value)


@app.command("y-value")
def y_value(
    expression: str = typer.Argument(...),
    row: str = typer.Option(..., help="Row as a JSON object."),
) -> None:
    """Evaluate a simple value expression against one row."""
    configure_logging()
    try:
        parsed = json.loads(row)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"--row is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise typer.BadParameter("--row must be a JSON object.")
    value = compute_y_value(expression, parsed)
    typer.echo(_format_number(value))


if __name__ == "__main__":
    app()
