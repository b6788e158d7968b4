"""``catalogo-query serve``: run the HTTP service."""

import typer

from ..relations.database import SQLiteRelationStore
from . import app
from ._common import console, get_settings
from .snapshot import _make_sink


@app.command()
def serve(
    ctx: typer.Context,
    port: int = typer.Option(8080, help="Port to listen on"),
    host: str = typer.Option("127.0.0.1", help="Host to bind to"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose server logging"),
) -> None:
    """Serve /api/q1../api/q10, /api/esiti and /health over HTTP."""
    try:
        from ..server import _check_deps

        _check_deps()
    except ImportError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    import uvicorn

    from ..server.app import create_app

    settings = get_settings(ctx)
    store = SQLiteRelationStore(settings.db_path)
    sink = _make_sink(settings.results_path, settings.history_path)
    asgi_app = create_app(store, sink, settings)

    url = f"http://{host}:{port}"
    console.print(f"[bold]Serving[/bold] {settings.db_path} → [link={url}]{url}[/link]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    try:
        uvicorn.run(
            asgi_app,
            host=host,
            port=port,
            log_level="info" if verbose else "warning",
        )
    except KeyboardInterrupt:
        pass
    finally:
        console.print("\n[dim]Stopped.[/dim]")
