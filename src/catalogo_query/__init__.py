"""
catalogo-query - the ten classic supplier/part catalog queries

Answers a fixed set of relational questions (division, correlated
aggregates, colour filters) over ``Fornitori``, ``Pezzi`` and ``Catalogo``,
and bundles all ten answers into timestamped snapshots.
"""

__version__ = "0.1.0"

from .config import QueryDefaults, Settings, load_settings
from .query import QUERY_LABELS, QueryEngine, QueryParams, resolve_params
from .relations import InMemoryRelationStore, Relations, SQLiteRelationStore
from .snapshot import JsonFileSink, ResultBundle, SnapshotBuilder

__all__ = [
    "QueryEngine",  # RunQuery
    "SnapshotBuilder",  # BuildSnapshot
    "QueryParams",
    "resolve_params",
    "QUERY_LABELS",
    "Relations",
    "InMemoryRelationStore",
    "SQLiteRelationStore",
    "ResultBundle",
    "JsonFileSink",
    "QueryDefaults",
    "Settings",
    "load_settings",
]
