"""Build result bundles and hand them to a sink."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import QueryDefaults
from ..exceptions import RelationStoreError, SinkError, SnapshotNotGeneratedError, SnapshotNotSavedError
from ..logging_config import get_logger
from ..query.engine import evaluate_all
from ..query.params import QueryParams
from ..relations.store import RelationStore
from .models import ResultBundle
from .sink import SnapshotSink

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with second precision, e.g. ``2024-05-01T10:00:00+00:00``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).replace(microsecond=0).isoformat()


@dataclass(frozen=True)
class SnapshotOutcome:
    """A stored bundle and where the sink put it."""

    bundle: ResultBundle
    location: str


class SnapshotBuilder:
    """Runs all ten queries over one relation read.

    Usage::

        builder = SnapshotBuilder(store, sink=JsonFileSink("storage/esiti.json"))
        outcome = builder.build_and_store(resolve_params(request_params))
    """

    def __init__(
        self,
        store: RelationStore,
        sink: Optional[SnapshotSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
        defaults: Optional[QueryDefaults] = None,
    ) -> None:
        self.store = store
        self.sink = sink
        self.clock = clock or utc_now
        self.defaults = defaults or QueryDefaults()

    def build(self, params: Optional[QueryParams] = None) -> ResultBundle:
        """BuildSnapshot: one store read, ten evaluations.

        Raises:
            SnapshotNotGeneratedError: If the relation store read fails
        """
        params = params or QueryParams.from_defaults(self.defaults)
        try:
            relations = self.store.read_relations()
        except RelationStoreError as e:
            logger.error("Snapshot not generated: %s", e)
            raise SnapshotNotGeneratedError(str(e)) from e

        generated_at = format_timestamp(self.clock())
        results = {label: tuple(rows) for label, rows in evaluate_all(relations, params).items()}
        logger.debug("Built snapshot at %s over %d relation rows", generated_at, len(relations))
        return ResultBundle(generated_at=generated_at, parameters=params, results=results)

    def build_and_store(self, params: Optional[QueryParams] = None) -> SnapshotOutcome:
        """Build a bundle and persist it through the configured sink.

        Raises:
            SnapshotNotGeneratedError: If the relation store read fails
            SnapshotNotSavedError: If the sink fails; carries the bundle
        """
        if self.sink is None:
            raise RuntimeError("SnapshotBuilder has no sink configured")

        bundle = self.build(params)
        try:
            location = self.sink.store(bundle)
        except (SinkError, OSError) as e:
            logger.warning("Snapshot generated but not saved: %s", e)
            raise SnapshotNotSavedError(bundle, str(e)) from e

        logger.info("Snapshot %s saved to %s", bundle.generated_at, location)
        return SnapshotOutcome(bundle=bundle, location=location)
