"""
Logging for catalogo-query: rich output on stderr, optional plain log file.

Query timings and relation reads log at DEBUG, stored snapshots at INFO,
coerced parameters and sink failures at WARNING.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "catalogo_query"

# Loggers of the ASGI server, kept in step with our own level.
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error")


def _level_for(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Attach a rich handler (and optionally a file handler) to the package logger.

    Calling this again replaces the handlers installed by a previous call,
    so repeated CLI invocations in one process do not duplicate output.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Only log errors (wins over ``verbose``)
        log_file: Also append plain-text records to this file

    Returns:
        The ``catalogo_query`` logger
    """
    level = _level_for(verbose, quiet)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logger = logging.getLogger(ROOT_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        handler.setLevel(level)
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    for name in _SERVER_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Logger under the ``catalogo_query`` namespace.

    Args:
        name: Module name, e.g. ``'catalogo_query.query.engine'``. Names
              outside the package are prefixed; ``None`` gives the root logger.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
