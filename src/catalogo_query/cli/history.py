"""History CLI command -- list snapshots kept in the SQLite history database."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..exceptions import SinkError
from ..snapshot.history import SQLiteSnapshotSink
from . import app
from ._common import console, err_console, get_settings


@app.command()
def history(
    ctx: typer.Context,
    path: Optional[Path] = typer.Option(
        None, "--path", help="History database (default: settings history_path)"
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Maximum number of snapshots to list",
        min=1,
        max=1000,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
) -> None:
    """
    List snapshots stored with [bold]snapshot --history[/bold].

    [bold cyan]Examples:[/bold cyan]

      catalogo-query history --path storage/history.db

      catalogo-query history --json --limit 5
    """
    settings = get_settings(ctx)
    db_path = path or settings.history_path
    if not db_path:
        console.print(
            "[yellow]No history database configured.[/yellow] "
            "Pass --path or set history_path in catalogo-query.toml."
        )
        raise typer.Exit(0)

    try:
        summaries = SQLiteSnapshotSink(db_path).history(limit=limit)
    except SinkError as e:
        err_console.print(f"[red]Error reading history:[/red] {e}")
        raise typer.Exit(e.exit_code)

    if not summaries:
        console.print("[yellow]No snapshots recorded yet.[/yellow]")
        raise typer.Exit(0)

    if json_output:
        print(json.dumps(summaries, indent=2, ensure_ascii=False))
    else:
        _output_rich(summaries)


def _output_rich(summaries: list[dict]) -> None:
    """Human-readable Rich table output."""
    table = Table(title="Snapshot History", show_lines=False, pad_edge=True)
    table.add_column("ID", style="bold", justify="right")
    table.add_column("Generated", style="green")
    table.add_column("Parameters", style="cyan")
    table.add_column("Rows", justify="right", style="yellow")

    for s in summaries:
        # Trim timestamp to date + time
        ts = s["generated_at"].replace("T", " ")
        if "+" in ts:
            ts = ts[: ts.index("+")]
        params = " ".join(f"{k}={v}" for k, v in s["parameters"].items())
        table.add_row(str(s["id"]), ts, params, str(sum(s["row_counts"].values())))

    console.print()
    console.print(table)
    console.print()
