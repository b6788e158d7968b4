"""Exception hierarchy for catalogo-query."""

from .base import CatalogoError
from .config import ConfigFileError, ConfigurationError, InvalidConfigError
from .query import RelationStoreError, UnknownQueryError
from .snapshot import (
    SinkError,
    SnapshotError,
    SnapshotLoadError,
    SnapshotNotGeneratedError,
    SnapshotNotSavedError,
)

__all__ = [
    "CatalogoError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidConfigError",
    "RelationStoreError",
    "UnknownQueryError",
    "SnapshotError",
    "SnapshotNotGeneratedError",
    "SnapshotNotSavedError",
    "SinkError",
    "SnapshotLoadError",
]
