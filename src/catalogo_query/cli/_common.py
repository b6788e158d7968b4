"""Shared CLI helpers."""

from dataclasses import fields
from typing import Iterable, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Settings
from ..query.engine import QueryDefinition
from ..query.params import QueryParams, resolve_params
from ..query.rows import Row

console = Console()
err_console = Console(stderr=True)


def get_settings(ctx: typer.Context) -> Settings:
    """Settings resolved by the root callback."""
    obj = ctx.find_root().obj or {}
    settings = obj.get("settings")
    if settings is None:
        settings = Settings()
    return settings


def build_params(
    settings: Settings,
    colore: Optional[str] = None,
    fornitore: Optional[str] = None,
    colore1: Optional[str] = None,
    colore2: Optional[str] = None,
    min_fornitori: Optional[str] = None,
) -> QueryParams:
    """Resolve CLI options the same way the HTTP layer resolves query strings."""
    return resolve_params(
        {
            "colore": colore,
            "fornitore": fornitore,
            "colore1": colore1,
            "colore2": colore2,
            "min_fornitori": min_fornitori,
        },
        settings.defaults,
    )


def rows_table(query: QueryDefinition, rows: Iterable[Row], params: QueryParams) -> Table:
    """Rich table of a query's rows, titled with the parameters it used."""
    used = ", ".join(f"{k}={v}" for k, v in query.parameter_values(params).items())
    title = f"{query.label} - {query.description}"
    if used:
        title += f" ({used})"

    table = Table(title=title, show_lines=False, pad_edge=True)
    columns = [f.name for f in fields(query.row_type)]
    for name in columns:
        numeric = name in ("fid", "pid", "costo")
        table.add_column(name, justify="right" if numeric else "left", style="cyan" if numeric else None)

    for row in rows:
        table.add_row(*(str(getattr(row, name)) for name in columns))
    return table
