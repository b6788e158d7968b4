"""Root callback: global options, logging and settings."""

from pathlib import Path
from typing import Optional

import typer

from .. import __version__
from ..config import load_settings
from ..exceptions import CatalogoError
from ..logging_config import setup_logging
from . import app
from ._common import err_console


def _version_callback(value: bool) -> None:
    if value:
        print(f"catalogo-query {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(
        None,
        "--db",
        help="SQLite database with Fornitori, Pezzi and Catalogo",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="TOML config file",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also log to this file"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """
    Answer the ten catalog queries over suppliers, parts and their costs.

    [bold cyan]Examples:[/bold cyan]

      catalogo-query --db database.sqlite query q3 --colore verde

      catalogo-query snapshot --min-fornitori 3
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    try:
        settings = load_settings(config_file=config, db_path=str(db) if db else None)
    except CatalogoError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(e.exit_code)
    ctx.obj = {"settings": settings}
