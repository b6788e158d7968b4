"""The ten catalog queries as pure functions over a ``Relations`` value.

Every function takes all of its arguments explicitly (no built-in
defaults), never mutates its input and returns a freshly sorted list.
Ordering ties are broken by the entity key (``fid`` / ``pid``) so the
physical order of rows in the store never shows in the result.

Division queries ("suppliers covering every part of ...") are plain set
differences: a supplier qualifies when the set of required parts minus the
set of parts it supplies is empty.
"""

from __future__ import annotations

from collections import defaultdict
from fractions import Fraction
from typing import Iterable, Optional

from ..relations.models import CatalogEntry, Cost, Relations, Supplier
from .rows import MaxCostRow, PartIdRow, PartNameRow, SupplierIdRow, SupplierNameRow

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalize_color(value: Optional[str]) -> str:
    """Case-insensitive comparison key for a colour."""
    return (value or "").casefold()


def _parts_by_supplier(catalog: Iterable[CatalogEntry]) -> dict[int, set[int]]:
    supplied: dict[int, set[int]] = defaultdict(set)
    for entry in catalog:
        supplied[entry.fid].add(entry.pid)
    return supplied


def _colors_by_supplier(relations: Relations) -> dict[int, set[str]]:
    """Normalised colours of the parts each supplier offers."""
    color_of = {part.pid: normalize_color(part.colore) for part in relations.parts}
    colors: dict[int, set[str]] = defaultdict(set)
    for entry in relations.catalog:
        if entry.pid in color_of:
            colors[entry.fid].add(color_of[entry.pid])
    return colors


def _by_name(suppliers: Iterable[Supplier]) -> list[SupplierNameRow]:
    ordered = sorted(suppliers, key=lambda s: (s.fnome, s.fid))
    return [SupplierNameRow(fnome=s.fnome) for s in ordered]


def _covering_suppliers(relations: Relations, required: set[int]) -> list[SupplierNameRow]:
    supplied = _parts_by_supplier(relations.catalog)
    qualifying = [s for s in relations.suppliers if not required - supplied.get(s.fid, set())]
    return _by_name(qualifying)


def _supplier_ids(fids: Iterable[int]) -> list[SupplierIdRow]:
    return [SupplierIdRow(fid=fid) for fid in sorted(set(fids))]


# ---------------------------------------------------------------------------
# q1 - q10
# ---------------------------------------------------------------------------


def parts_in_catalog(relations: Relations) -> list[PartNameRow]:
    """q1: distinct names of parts listed by at least one supplier."""
    listed = {entry.pid for entry in relations.catalog}
    names = {part.pnome for part in relations.parts if part.pid in listed}
    return [PartNameRow(pnome=name) for name in sorted(names)]


def suppliers_covering_all_parts(relations: Relations) -> list[SupplierNameRow]:
    """q2: suppliers that supply every part.

    With no parts at all every supplier qualifies.
    """
    return _covering_suppliers(relations, {part.pid for part in relations.parts})


def suppliers_covering_color(relations: Relations, colore: str) -> list[SupplierNameRow]:
    """q3: suppliers that supply every part of colour *colore*.

    With no part of that colour every supplier qualifies.
    """
    target = normalize_color(colore)
    required = {part.pid for part in relations.parts if normalize_color(part.colore) == target}
    return _covering_suppliers(relations, required)


def parts_exclusive_to_supplier(relations: Relations, fornitore: str) -> list[PartNameRow]:
    """q4: names of parts supplied by *fornitore* and by no differently-named supplier.

    Supplier names are compared exactly; two suppliers sharing the name
    *fornitore* do not exclude each other.
    """
    name_of = {s.fid: s.fnome for s in relations.suppliers}
    sellers: dict[int, set[str]] = defaultdict(set)
    for entry in relations.catalog:
        if entry.fid in name_of:
            sellers[entry.pid].add(name_of[entry.fid])

    names = {part.pnome for part in relations.parts if sellers.get(part.pid) == {fornitore}}
    return [PartNameRow(pnome=name) for name in sorted(names)]


def suppliers_above_part_average(relations: Relations) -> list[SupplierIdRow]:
    """q5: suppliers charging strictly more than a part's average cost.

    Means are compared as exact fractions, so a part with a single
    catalog row (cost equal to its mean) never contributes.
    """
    totals: dict[int, Fraction] = defaultdict(Fraction)
    counts: dict[int, int] = defaultdict(int)
    for entry in relations.catalog:
        totals[entry.pid] += Fraction(entry.costo)
        counts[entry.pid] += 1

    return _supplier_ids(
        entry.fid
        for entry in relations.catalog
        if Fraction(entry.costo) * counts[entry.pid] > totals[entry.pid]
    )


def most_expensive_offers(relations: Relations) -> list[MaxCostRow]:
    """q6: for each part, every supplier offering it at its maximum cost.

    Ties are all reported. Ordered by ``pid`` then supplier name.
    """
    highest: dict[int, Cost] = {}
    for entry in relations.catalog:
        if entry.pid not in highest or entry.costo > highest[entry.pid]:
            highest[entry.pid] = entry.costo

    part_of = {part.pid: part for part in relations.parts}
    supplier_of = {s.fid: s for s in relations.suppliers}
    offers = [
        entry
        for entry in relations.catalog
        if entry.costo == highest[entry.pid] and entry.pid in part_of and entry.fid in supplier_of
    ]
    offers.sort(key=lambda e: (e.pid, supplier_of[e.fid].fnome, e.fid))
    return [
        MaxCostRow(
            pid=entry.pid,
            pnome=part_of[entry.pid].pnome,
            fnome=supplier_of[entry.fid].fnome,
            costo=entry.costo,
        )
        for entry in offers
    ]


def suppliers_only_color(relations: Relations, colore: str) -> list[SupplierIdRow]:
    """q7: suppliers whose parts are all of colour *colore*.

    A supplier with no catalog rows does not qualify.
    """
    target = normalize_color(colore)
    colors = _colors_by_supplier(relations)
    return _supplier_ids(
        s.fid for s in relations.suppliers if colors.get(s.fid) and colors[s.fid] == {target}
    )


def suppliers_both_colors(relations: Relations, colore1: str, colore2: str) -> list[SupplierIdRow]:
    """q8: suppliers offering a part of *colore1* and a part of *colore2*."""
    wanted = {normalize_color(colore1), normalize_color(colore2)}
    colors = _colors_by_supplier(relations)
    return _supplier_ids(s.fid for s in relations.suppliers if wanted <= colors.get(s.fid, set()))


def suppliers_either_color(relations: Relations, colore1: str, colore2: str) -> list[SupplierIdRow]:
    """q9: suppliers offering a part of *colore1* or of *colore2*."""
    wanted = {normalize_color(colore1), normalize_color(colore2)}
    colors = _colors_by_supplier(relations)
    return _supplier_ids(s.fid for s in relations.suppliers if wanted & colors.get(s.fid, set()))


def parts_with_multiple_suppliers(relations: Relations, min_fornitori: int) -> list[PartIdRow]:
    """q10: parts offered by at least *min_fornitori* distinct suppliers."""
    suppliers_of: dict[int, set[int]] = defaultdict(set)
    for entry in relations.catalog:
        suppliers_of[entry.pid].add(entry.fid)
    return [
        PartIdRow(pid=pid)
        for pid in sorted(suppliers_of)
        if len(suppliers_of[pid]) >= min_fornitori
    ]
