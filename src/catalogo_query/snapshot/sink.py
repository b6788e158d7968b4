"""Snapshot sinks: the store/load contract and the JSON file implementation."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

from ..exceptions import SinkError, SnapshotLoadError
from ..logging_config import get_logger
from ..query.rows import json_default
from .models import ResultBundle

logger = get_logger(__name__)


@runtime_checkable
class SnapshotSink(Protocol):
    """Where result bundles are persisted.

    ``store`` returns a human-readable location; ``load`` returns the most
    recently stored bundle, or ``None`` when nothing has been stored yet.
    """

    @property
    def location(self) -> str: ...

    def store(self, bundle: ResultBundle) -> str: ...

    def load(self) -> Optional[ResultBundle]: ...


class JsonFileSink:
    """Keeps the latest bundle as a pretty-printed JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so readers never see a half-written file. Concurrent writers
    are not serialised: the last write wins.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    @property
    def location(self) -> str:
        return str(self.path)

    def store(self, bundle: ResultBundle) -> str:
        payload = json.dumps(bundle.to_dict(), indent=4, ensure_ascii=False, default=json_default)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise SinkError(str(e), location=str(self.path)) from e

        logger.debug("Wrote %d bytes to %s", len(payload), self.path)
        return str(self.path)

    def load(self) -> Optional[ResultBundle]:
        data = self.load_raw()
        if data is None:
            return None
        try:
            return ResultBundle.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise SnapshotLoadError(f"not a result bundle: {e}", location=str(self.path)) from e

    def load_raw(self) -> Optional[dict]:
        """Return the stored JSON document as-is, or ``None`` if absent."""
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            raise SinkError(str(e), location=str(self.path)) from e
        except json.JSONDecodeError as e:
            raise SnapshotLoadError(f"invalid JSON: {e}", location=str(self.path)) from e


class CompositeSink:
    """Stores into a primary sink and then into every mirror.

    ``load`` reads from the primary only. A failing mirror fails the store,
    even though the primary already holds the bundle.
    """

    def __init__(self, primary: SnapshotSink, *mirrors: SnapshotSink) -> None:
        self.primary = primary
        self.mirrors = mirrors

    @property
    def location(self) -> str:
        return self.primary.location

    def store(self, bundle: ResultBundle) -> str:
        location = self.primary.store(bundle)
        for mirror in self.mirrors:
            mirror.store(bundle)
        return location

    def load(self) -> Optional[ResultBundle]:
        return self.primary.load()
