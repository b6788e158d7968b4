"""Query registry and the RunQuery entry point.

The registry maps each label (``q1`` .. ``q10``) to its evaluator function
and the parameters it consumes. ``QueryEngine`` reads the relation store
once per call and evaluates against that single read.

Usage::

    engine = QueryEngine(SQLiteRelationStore("database.sqlite"))
    rows = engine.run("q3", resolve_params({"colore": "verde"}))
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import QueryDefaults
from ..exceptions import UnknownQueryError
from ..logging_config import get_logger
from ..relations.models import Relations
from ..relations.store import RelationStore
from . import evaluator
from .params import QueryParams
from .rows import MaxCostRow, PartIdRow, PartNameRow, Row, SupplierIdRow, SupplierNameRow

logger = get_logger(__name__)


@dataclass(frozen=True)
class QueryDefinition:
    """One of the ten catalog queries."""

    label: str
    number: int
    description: str
    row_type: type
    parameters: tuple[str, ...]
    evaluate: Callable[[Relations, QueryParams], list]

    def parameter_values(self, params: QueryParams) -> dict[str, object]:
        """The subset of *params* this query consumes, in declaration order."""
        return {name: getattr(params, name) for name in self.parameters}


QUERIES: dict[str, QueryDefinition] = {
    q.label: q
    for q in (
        QueryDefinition(
            "q1", 1, "Parts listed by at least one supplier", PartNameRow, (),
            lambda r, p: evaluator.parts_in_catalog(r),
        ),
        QueryDefinition(
            "q2", 2, "Suppliers supplying every part", SupplierNameRow, (),
            lambda r, p: evaluator.suppliers_covering_all_parts(r),
        ),
        QueryDefinition(
            "q3", 3, "Suppliers supplying every part of a colour", SupplierNameRow, ("colore",),
            lambda r, p: evaluator.suppliers_covering_color(r, p.colore),
        ),
        QueryDefinition(
            "q4", 4, "Parts supplied only by one supplier", PartNameRow, ("fornitore",),
            lambda r, p: evaluator.parts_exclusive_to_supplier(r, p.fornitore),
        ),
        QueryDefinition(
            "q5", 5, "Suppliers charging above a part's average cost", SupplierIdRow, (),
            lambda r, p: evaluator.suppliers_above_part_average(r),
        ),
        QueryDefinition(
            "q6", 6, "Highest-cost offers per part", MaxCostRow, (),
            lambda r, p: evaluator.most_expensive_offers(r),
        ),
        QueryDefinition(
            "q7", 7, "Suppliers offering only parts of a colour", SupplierIdRow, ("colore",),
            lambda r, p: evaluator.suppliers_only_color(r, p.colore),
        ),
        QueryDefinition(
            "q8", 8, "Suppliers offering parts of both colours", SupplierIdRow,
            ("colore1", "colore2"),
            lambda r, p: evaluator.suppliers_both_colors(r, p.colore1, p.colore2),
        ),
        QueryDefinition(
            "q9", 9, "Suppliers offering parts of either colour", SupplierIdRow,
            ("colore1", "colore2"),
            lambda r, p: evaluator.suppliers_either_color(r, p.colore1, p.colore2),
        ),
        QueryDefinition(
            "q10", 10, "Parts offered by several suppliers", PartIdRow, ("min_fornitori",),
            lambda r, p: evaluator.parts_with_multiple_suppliers(r, p.min_fornitori),
        ),
    )
}

QUERY_LABELS: tuple[str, ...] = tuple(QUERIES)


def get_query(label: str) -> QueryDefinition:
    """Look up a query by label (``"q7"``, ``"Q7"`` and ``" q7 "`` all work)."""
    key = label.strip().lower()
    try:
        return QUERIES[key]
    except KeyError:
        raise UnknownQueryError(label, QUERY_LABELS) from None


def evaluate(label: str, relations: Relations, params: QueryParams) -> list[Row]:
    """Evaluate one query against an already-read set of relations."""
    query = get_query(label)
    start = time.perf_counter()
    rows = query.evaluate(relations, params)
    logger.debug(
        "%s returned %d row(s) in %.2fms",
        query.label,
        len(rows),
        (time.perf_counter() - start) * 1000,
    )
    return rows


def evaluate_all(relations: Relations, params: QueryParams) -> dict[str, list[Row]]:
    """Evaluate every query, in label order, against the same relations."""
    return {label: evaluate(label, relations, params) for label in QUERY_LABELS}


class QueryEngine:
    """Runs named queries against a relation store."""

    def __init__(self, store: RelationStore, defaults: Optional[QueryDefaults] = None) -> None:
        self.store = store
        self.defaults = defaults or QueryDefaults()

    def default_params(self) -> QueryParams:
        return QueryParams.from_defaults(self.defaults)

    def run(self, label: str, params: Optional[QueryParams] = None) -> list[Row]:
        """RunQuery: read the store once and evaluate *label*.

        Raises:
            UnknownQueryError: If *label* is not one of ``q1`` .. ``q10``
            RelationStoreError: If the store read fails
        """
        query = get_query(label)
        relations = self.store.read_relations()
        return evaluate(query.label, relations, params or self.default_params())
