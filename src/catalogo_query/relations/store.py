"""The read contract the query core has with its relation store."""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from .models import Relations


@runtime_checkable
class RelationStore(Protocol):
    """Read-only access to Suppliers, Parts and Catalog.

    One ``read_relations()`` call must return a self-consistent view of all
    three relations. Stores never filter; filtering is the evaluator's job.
    """

    def read_relations(self) -> Relations: ...


class InMemoryRelationStore:
    """Relation store backed by an in-memory ``Relations`` value.

    ``replace`` swaps the whole value at once, so a reader sees either the
    old relations or the new ones, never a mix.
    """

    def __init__(self, relations: Relations | None = None) -> None:
        self._lock = threading.Lock()
        self._relations = relations if relations is not None else Relations()

    def read_relations(self) -> Relations:
        with self._lock:
            return self._relations

    def replace(self, relations: Relations) -> None:
        """Install a new set of relations."""
        with self._lock:
            self._relations = relations
