"""Result row types. Field names match the relation column names."""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, Union

from ..relations.models import Cost


@dataclass(frozen=True)
class PartNameRow:
    pnome: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SupplierNameRow:
    fnome: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SupplierIdRow:
    fid: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PartIdRow:
    pid: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MaxCostRow:
    """A supplier offering a part at that part's highest catalog cost."""

    pid: int
    pnome: str
    fnome: str
    costo: Cost

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if isinstance(self.costo, Decimal):
            data["costo"] = float(self.costo)
        return data


def json_default(value: Any) -> Any:
    """``json.dumps`` hook: Decimal costs become JSON numbers, not strings."""
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


Row = Union[PartNameRow, SupplierNameRow, SupplierIdRow, PartIdRow, MaxCostRow]
