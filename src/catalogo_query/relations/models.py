"""Relation model: suppliers, parts and the catalog linking them.

Every record is a frozen dataclass and ``Relations`` holds tuples, so a
value read from a store can be shared freely between threads.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Tuple, Union

Cost = Union[int, float, Decimal]


@dataclass(frozen=True)
class Supplier:
    """A row of ``Fornitori``."""

    fid: int
    fnome: str


@dataclass(frozen=True)
class Part:
    """A row of ``Pezzi``. ``colore`` is compared case-insensitively."""

    pid: int
    pnome: str
    colore: str


@dataclass(frozen=True)
class CatalogEntry:
    """A row of ``Catalogo``: supplier ``fid`` offers part ``pid`` at ``costo``.

    A ``(fid, pid)`` pair may appear more than once.
    """

    fid: int
    pid: int
    costo: Cost


@dataclass(frozen=True)
class Relations:
    """One consistent read of the three relations."""

    suppliers: Tuple[Supplier, ...] = ()
    parts: Tuple[Part, ...] = ()
    catalog: Tuple[CatalogEntry, ...] = ()

    @classmethod
    def from_rows(
        cls,
        suppliers: Iterable[Iterable] = (),
        parts: Iterable[Iterable] = (),
        catalog: Iterable[Iterable] = (),
    ) -> "Relations":
        """Build relations from plain tuples.

        Example::

            Relations.from_rows(
                suppliers=[(1, "Acme")],
                parts=[(10, "Bolt", "red")],
                catalog=[(1, 10, 5.0)],  # (fid, pid, costo)
            )
        """
        return cls(
            suppliers=tuple(Supplier(*row) for row in suppliers),
            parts=tuple(Part(*row) for row in parts),
            catalog=tuple(CatalogEntry(*row) for row in catalog),
        )

    def __len__(self) -> int:
        return len(self.suppliers) + len(self.parts) + len(self.catalog)
