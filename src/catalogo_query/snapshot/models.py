"""Result bundle: the immutable record of one all-queries snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from ..query.engine import QUERIES, QUERY_LABELS
from ..query.params import QueryParams
from ..query.rows import Row


@dataclass(frozen=True)
class ResultBundle:
    """Output of every query plus the metadata needed to interpret it.

    ``to_dict`` produces the persisted file contract::

        {
          "generated_at": "2024-05-01T10:00:00+00:00",
          "results": {"q1": [...], ..., "q10": [...]},
          "parameters": {"colore", "fornitore", "colore1", "colore2", "min_fornitori"}
        }
    """

    generated_at: str  # ISO-8601, UTC
    parameters: QueryParams
    results: Mapping[str, tuple[Row, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Read-only view over a private copy; rows become tuples.
        frozen = {label: tuple(rows) for label, rows in self.results.items()}
        object.__setattr__(self, "results", MappingProxyType(frozen))

    def rows(self, label: str) -> list[Row]:
        return list(self.results[label])

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at,
            "results": {
                label: [row.to_dict() for row in self.results.get(label, ())]
                for label in QUERY_LABELS
            },
            "parameters": self.parameters.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ResultBundle":
        """Rebuild a bundle from its ``to_dict`` form.

        Raises:
            KeyError / TypeError / ValueError: If *data* is not a bundle
        """
        raw_results = data["results"]
        results = {
            label: tuple(QUERIES[label].row_type(**row) for row in raw_results.get(label, []))
            for label in QUERY_LABELS
        }
        return cls(
            generated_at=str(data["generated_at"]),
            parameters=QueryParams(**data["parameters"]),
            results=results,
        )
