"""Snapshot exceptions: building, storing and loading result bundles."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from .base import CatalogoError

if TYPE_CHECKING:
    from ..snapshot.models import ResultBundle


class SnapshotError(CatalogoError):
    """Base class for snapshot failures."""

    pass


class SnapshotNotGeneratedError(SnapshotError):
    """The relation store failed while building; no results were computed."""

    def __init__(self, reason: str):
        super().__init__("Snapshot not generated", details={"reason": reason})
        self.reason = reason


class SnapshotNotSavedError(SnapshotError):
    """The bundle was computed but the sink could not persist it.

    The computed bundle is attached so the caller can still return it.
    """

    def __init__(self, bundle: "ResultBundle", reason: str):
        super().__init__("Snapshot generated but not saved", details={"reason": reason})
        self.bundle = bundle
        self.reason = reason


class SinkError(SnapshotError):
    """Raised by a sink when writing or reading its storage fails."""

    def __init__(self, reason: str, location: Optional[str] = None):
        details = {"reason": reason}
        if location:
            details["location"] = location
        super().__init__("Snapshot sink failed", details=details)
        self.reason = reason
        self.location = location


class SnapshotLoadError(SinkError):
    """A stored bundle exists but cannot be decoded."""

    pass
