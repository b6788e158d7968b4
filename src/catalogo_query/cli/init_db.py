"""``catalogo-query init-db``: create the relation tables, optionally load a dump."""

import sqlite3
from pathlib import Path
from typing import Optional

import typer

from ..relations.database import CatalogDB
from . import app
from ._common import console, err_console, get_settings


@app.command("init-db")
def init_db(
    ctx: typer.Context,
    dump: Optional[Path] = typer.Option(
        None,
        "--dump",
        help="SQL dump to load (its own CREATE TABLEs or INSERTs only)",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Create Fornitori, Pezzi and Catalogo in the configured database."""
    settings = get_settings(ctx)
    try:
        with CatalogDB(settings.db_path) as db:
            db.initialise(dump)
    except (sqlite3.Error, OSError) as e:
        err_console.print(f"[red]Cannot initialise {settings.db_path}:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Initialised[/green] {settings.db_path}")
