"""Relation model and the stores that supply it to the query core."""

from .database import CatalogDB, SQLiteRelationStore
from .models import CatalogEntry, Cost, Part, Relations, Supplier
from .store import InMemoryRelationStore, RelationStore

__all__ = [
    "Supplier",
    "Part",
    "CatalogEntry",
    "Cost",
    "Relations",
    "RelationStore",
    "InMemoryRelationStore",
    "SQLiteRelationStore",
    "CatalogDB",
]
