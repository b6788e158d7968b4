"""All-queries snapshots: the result bundle, its builder and its sinks."""

from .builder import SnapshotBuilder, SnapshotOutcome, format_timestamp
from .history import BundleHistoryDB, SQLiteSnapshotSink, list_bundles, load_bundle, save_bundle
from .models import ResultBundle
from .sink import CompositeSink, JsonFileSink, SnapshotSink

__all__ = [
    "ResultBundle",
    "SnapshotBuilder",
    "SnapshotOutcome",
    "format_timestamp",
    "SnapshotSink",
    "JsonFileSink",
    "CompositeSink",
    "SQLiteSnapshotSink",
    "BundleHistoryDB",
    "save_bundle",
    "load_bundle",
    "list_bundles",
]
