"""``catalogo-query snapshot`` / ``saved``: build, store and show result bundles."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..exceptions import SinkError, SnapshotNotGeneratedError, SnapshotNotSavedError
from ..query.engine import QUERIES
from ..query.rows import json_default
from ..relations.database import SQLiteRelationStore
from ..snapshot.builder import SnapshotBuilder
from ..snapshot.history import SQLiteSnapshotSink
from ..snapshot.models import ResultBundle
from ..snapshot.sink import CompositeSink, JsonFileSink, SnapshotSink
from . import app
from ._common import build_params, console, err_console, get_settings


def _make_sink(results_path: str, history_path: Optional[str]) -> SnapshotSink:
    primary = JsonFileSink(results_path)
    if history_path:
        return CompositeSink(primary, SQLiteSnapshotSink(history_path))
    return primary


def _summary_table(bundle: ResultBundle, location: str) -> Table:
    table = Table(title=f"Snapshot {bundle.generated_at}", caption=location)
    table.add_column("Query", style="bold")
    table.add_column("Description")
    table.add_column("Rows", justify="right", style="yellow")
    for label, rows in bundle.results.items():
        table.add_row(label, QUERIES[label].description, str(len(rows)))
    return table


@app.command()
def snapshot(
    ctx: typer.Context,
    colore: Optional[str] = typer.Option(None, "--colore", help="Colour for q3 / q7"),
    fornitore: Optional[str] = typer.Option(None, "--fornitore", help="Supplier name for q4"),
    colore1: Optional[str] = typer.Option(None, "--colore1", help="First colour for q8 / q9"),
    colore2: Optional[str] = typer.Option(None, "--colore2", help="Second colour for q8 / q9"),
    min_fornitori: Optional[str] = typer.Option(
        None, "--min-fornitori", help="Supplier threshold for q10 (at least 2)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="JSON file to write (default: settings results_path)"
    ),
    history: Optional[Path] = typer.Option(
        None, "--history", help="Also append the bundle to this SQLite history database"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the bundle as JSON"),
) -> None:
    """
    Run all ten queries over one read of the database and save the results.
    """
    settings = get_settings(ctx)
    params = build_params(settings, colore, fornitore, colore1, colore2, min_fornitori)
    history_path = str(history) if history else settings.history_path
    sink = _make_sink(str(output) if output else settings.results_path, history_path)
    builder = SnapshotBuilder(
        SQLiteRelationStore(settings.db_path), sink=sink, defaults=settings.defaults
    )

    try:
        outcome = builder.build_and_store(params)
    except SnapshotNotGeneratedError as e:
        err_console.print(f"[red]Snapshot not generated:[/red] {e.reason}")
        raise typer.Exit(e.exit_code)
    except SnapshotNotSavedError as e:
        err_console.print(f"[red]Snapshot generated but not saved:[/red] {e.reason}")
        if json_output:
            print(json.dumps(e.bundle.to_dict(), indent=2, ensure_ascii=False, default=json_default))
        raise typer.Exit(e.exit_code)

    if json_output:
        print(json.dumps(outcome.bundle.to_dict(), indent=2, ensure_ascii=False, default=json_default))
        return

    console.print()
    console.print(_summary_table(outcome.bundle, outcome.location))
    console.print(f"[green]Saved[/green] to {outcome.location}")


@app.command()
def saved(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="JSON file to read (default: settings results_path)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the bundle as JSON"),
) -> None:
    """
    Show the last saved snapshot.
    """
    settings = get_settings(ctx)
    sink = JsonFileSink(output or settings.results_path)
    try:
        bundle = sink.load()
    except SinkError as e:
        err_console.print(f"[red]Cannot read saved snapshot:[/red] {e}")
        raise typer.Exit(e.exit_code)

    if bundle is None:
        console.print(
            f"[yellow]No snapshot saved yet[/yellow] at {sink.location}. "
            "Run [bold]catalogo-query snapshot[/bold] first."
        )
        raise typer.Exit(1)

    if json_output:
        print(json.dumps(bundle.to_dict(), indent=2, ensure_ascii=False, default=json_default))
        return

    console.print()
    console.print(_summary_table(bundle, sink.location))
    params = ", ".join(f"{k}={v}" for k, v in bundle.parameters.to_dict().items())
    console.print(f"[dim]Parameters: {params}[/dim]")
