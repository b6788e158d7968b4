"""The ten catalog queries, their parameters and the engine that runs them."""

from .engine import (
    QUERIES,
    QUERY_LABELS,
    QueryDefinition,
    QueryEngine,
    evaluate,
    evaluate_all,
    get_query,
)
from .params import PARAMETER_NAMES, QueryParams, coerce_int, resolve_params
from .rows import (
    MaxCostRow,
    PartIdRow,
    PartNameRow,
    Row,
    SupplierIdRow,
    SupplierNameRow,
    json_default,
)

__all__ = [
    "QUERIES",
    "QUERY_LABELS",
    "QueryDefinition",
    "QueryEngine",
    "evaluate",
    "evaluate_all",
    "get_query",
    "PARAMETER_NAMES",
    "QueryParams",
    "coerce_int",
    "resolve_params",
    "Row",
    "PartNameRow",
    "SupplierNameRow",
    "SupplierIdRow",
    "PartIdRow",
    "MaxCostRow",
    "json_default",
]
