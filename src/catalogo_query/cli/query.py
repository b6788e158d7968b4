"""``catalogo-query query``: run one of the ten queries."""

import json
from typing import Optional

import typer

from ..exceptions import RelationStoreError, UnknownQueryError
from ..query.engine import QUERY_LABELS, QueryEngine, get_query
from ..query.rows import json_default
from ..relations.database import SQLiteRelationStore
from . import app
from ._common import build_params, console, err_console, get_settings, rows_table


@app.command()
def query(
    ctx: typer.Context,
    label: str = typer.Argument(..., help=f"Query label ({QUERY_LABELS[0]}..{QUERY_LABELS[-1]})"),
    colore: Optional[str] = typer.Option(None, "--colore", help="Colour for q3 / q7"),
    fornitore: Optional[str] = typer.Option(None, "--fornitore", help="Supplier name for q4"),
    colore1: Optional[str] = typer.Option(None, "--colore1", help="First colour for q8 / q9"),
    colore2: Optional[str] = typer.Option(None, "--colore2", help="Second colour for q8 / q9"),
    min_fornitori: Optional[str] = typer.Option(
        None, "--min-fornitori", help="Supplier threshold for q10 (at least 2)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output rows as JSON"),
) -> None:
    """
    Run a single query against the relations database.

    [bold cyan]Examples:[/bold cyan]

      catalogo-query query q1

      catalogo-query query q8 --colore1 rosso --colore2 blu --json
    """
    settings = get_settings(ctx)
    try:
        definition = get_query(label)
    except UnknownQueryError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(e.exit_code)

    params = build_params(settings, colore, fornitore, colore1, colore2, min_fornitori)
    engine = QueryEngine(SQLiteRelationStore(settings.db_path), settings.defaults)
    try:
        rows = engine.run(definition.label, params)
    except RelationStoreError as e:
        err_console.print(f"[red]Cannot read relations:[/red] {e}")
        raise typer.Exit(e.exit_code)

    if json_output:
        payload = {"query": definition.number}
        payload.update(definition.parameter_values(params))
        payload["data"] = [row.to_dict() for row in rows]
        print(json.dumps(payload, indent=2, ensure_ascii=False, default=json_default))
        return

    console.print()
    console.print(rows_table(definition, rows, params))
    if not rows:
        console.print("[dim]No rows.[/dim]")
    console.print()
