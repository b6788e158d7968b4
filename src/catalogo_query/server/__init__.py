"""HTTP service exposing the ten queries and the snapshot endpoints.

``create_app`` lives in :mod:`catalogo_query.server.app`; importing this
package alone does not require the web stack.
"""

from __future__ import annotations

import importlib.util

_SERVER_MODULES = ("starlette", "uvicorn")


def _check_deps() -> None:
    """Raise ImportError naming every missing server module."""
    missing = [name for name in _SERVER_MODULES if importlib.util.find_spec(name) is None]
    if missing:
        raise ImportError(
            f"Missing server dependencies: {', '.join(missing)}. "
            "Reinstall with: pip install catalogo-query"
        )
