"""Relation store and query dispatch exceptions."""

from typing import Iterable, Optional

from .base import CatalogoError


class RelationStoreError(CatalogoError):
    """Raised when the relation store cannot produce a consistent read.

    Store failures are fatal for the caller: the evaluator never retries and
    never returns partial results.
    """

    def __init__(self, reason: str, source: Optional[str] = None):
        details = {"reason": reason}
        if source:
            details["source"] = source
        super().__init__("Relation store read failed", details=details)
        self.reason = reason
        self.source = source


class UnknownQueryError(CatalogoError):
    """Raised when a query label is not one of the ten known queries."""

    exit_code = 2

    def __init__(self, label: str, known: Iterable[str]):
        known_list = list(known)
        super().__init__(
            f"Unknown query: {label!r}",
            details={"known": ", ".join(known_list)},
        )
        self.label = label
        self.known = known_list
