"""Query parameters: one typed struct, defaulted and clamped at the boundary."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from ..config import MIN_SUPPLIERS_FLOOR, QueryDefaults
from ..logging_config import get_logger

logger = get_logger(__name__)

PARAMETER_NAMES = ("colore", "fornitore", "colore1", "colore2", "min_fornitori")


@dataclass(frozen=True)
class QueryParams:
    """Resolved parameters shared by the ten queries.

    ``min_fornitori`` is raised to the floor of 2 on construction; a lower
    threshold is silently replaced, never rejected.
    """

    colore: str
    fornitore: str
    colore1: str
    colore2: str
    min_fornitori: int

    def __post_init__(self) -> None:
        if self.min_fornitori < MIN_SUPPLIERS_FLOOR:
            object.__setattr__(self, "min_fornitori", MIN_SUPPLIERS_FLOOR)

    @classmethod
    def from_defaults(cls, defaults: QueryDefaults) -> "QueryParams":
        return cls(
            colore=defaults.colore,
            fornitore=defaults.fornitore,
            colore1=defaults.colore1,
            colore2=defaults.colore2,
            min_fornitori=defaults.min_fornitori,
        )

    def to_dict(self) -> dict[str, Any]:
        """Parameters in their persisted key order."""
        return asdict(self)


def resolve_params(
    raw: Optional[Mapping[str, Any]] = None,
    defaults: Optional[QueryDefaults] = None,
) -> QueryParams:
    """Turn loosely-typed caller input into :class:`QueryParams`.

    Missing (or ``None``) values take the configured default. Text values
    are used as given (converted with ``str``). ``min_fornitori`` is coerced
    leniently: anything that is not a finite number falls back to the
    default instead of raising, then the floor of 2 applies.
    """
    raw = raw or {}
    defaults = defaults or QueryDefaults()

    def text(name: str) -> str:
        value = raw.get(name)
        return getattr(defaults, name) if value is None else str(value)

    return QueryParams(
        colore=text("colore"),
        fornitore=text("fornitore"),
        colore1=text("colore1"),
        colore2=text("colore2"),
        min_fornitori=coerce_int(raw.get("min_fornitori"), defaults.min_fornitori),
    )


def coerce_int(value: Any, default: int) -> int:
    """Leniently convert *value* to an int, returning *default* on failure.

    ``"3"`` and ``" 3 "`` give 3, ``"3.7"`` and ``3.7`` truncate to 3;
    booleans, non-numeric text, NaN and infinities give *default*.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        logger.warning("Ignoring boolean integer parameter %r, using %d", value, default)
        return default
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        pass
    try:
        number = float(str(value).strip())
    except ValueError:
        logger.warning("Non-numeric integer parameter %r, using %d", value, default)
        return default
    if not math.isfinite(number):
        logger.warning("Non-finite integer parameter %r, using %d", value, default)
        return default
    return int(number)
