"""CLI entry point: registers all subcommands."""

import typer

app = typer.Typer(
    name="catalogo-query",
    help="catalogo-query - the ten supplier/part catalog queries",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .root import root as _root  # noqa: F401, E402
from .query import query as _query  # noqa: F401, E402
from .snapshot import snapshot as _snapshot, saved as _saved  # noqa: F401, E402
from .history import history as _history  # noqa: F401, E402
from .init_db import init_db as _init_db  # noqa: F401, E402
from .serve import serve as _serve  # noqa: F401, E402


def main() -> None:
    app()
