"""Generic page slicing for API result lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, TypeVar

from ..query.params import coerce_int

T = TypeVar("T")


@dataclass(frozen=True)
class Page:
    """A 1-based page of ``page_size`` rows."""

    page: int = 1
    page_size: int = 50

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def slice(self, rows: Sequence[T]) -> list[T]:
        return list(rows[self.offset : self.offset + self.page_size])


def parse_page(
    query_params: Mapping[str, Any], default_size: int = 50, max_size: int = 100
) -> Page:
    """Read ``page`` / ``page_size`` from request parameters.

    ``page`` is at least 1; ``page_size`` is clamped to ``[1, max_size]``.
    Malformed values fall back to the defaults.
    """
    page = max(1, coerce_int(query_params.get("page"), 1))
    size = max(1, min(max_size, coerce_int(query_params.get("page_size"), default_size)))
    return Page(page=page, page_size=size)
