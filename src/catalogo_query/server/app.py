"""Starlette ASGI application for the catalog query service."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from ..config import Settings
from ..exceptions import (
    RelationStoreError,
    SinkError,
    SnapshotNotGeneratedError,
    SnapshotNotSavedError,
    UnknownQueryError,
)
from ..query.engine import QueryEngine, get_query
from ..query.params import resolve_params
from ..query.rows import json_default
from ..relations.store import RelationStore
from ..snapshot.builder import SnapshotBuilder
from ..snapshot.sink import SnapshotSink
from .pagination import parse_page

logger = logging.getLogger(__name__)


class CatalogJSONResponse(JSONResponse):
    """JSON response that keeps non-ASCII text and writes Decimal costs as numbers."""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
            default=json_default,
        ).encode("utf-8")


def create_app(
    store: RelationStore,
    sink: SnapshotSink,
    settings: Optional[Settings] = None,
) -> Starlette:
    """Build the Starlette application wired to *store* and *sink*.

    Args:
        store: Relation store every request reads from
        sink: Where ``/api/esiti`` persists result bundles
        settings: Query defaults and pagination limits
    """
    settings = settings or Settings()
    engine = QueryEngine(store, settings.defaults)
    builder = SnapshotBuilder(store, sink=sink, defaults=settings.defaults)

    async def homepage(request: Request) -> Response:
        return RedirectResponse("/q1", status_code=302)

    async def short_query(request: Request) -> Response:
        """``/qN`` redirects to ``/api/qN`` keeping the query string."""
        try:
            query = get_query(request.path_params["label"])
        except UnknownQueryError as e:
            return CatalogJSONResponse({"error": str(e)}, status_code=404)
        location = f"/api/{query.label}"
        if request.url.query:
            location += f"?{request.url.query}"
        return RedirectResponse(location, status_code=302)

    async def api_query(request: Request) -> Response:
        try:
            query = get_query(request.path_params["label"])
        except UnknownQueryError as e:
            return CatalogJSONResponse({"error": str(e)}, status_code=404)

        params = resolve_params(request.query_params, settings.defaults)
        page = parse_page(request.query_params, settings.page_size, settings.max_page_size)
        try:
            rows = await run_in_threadpool(engine.run, query.label, params)
        except RelationStoreError as e:
            logger.error("%s failed: %s", query.label, e)
            return CatalogJSONResponse({"error": str(e)}, status_code=503)

        payload: dict[str, Any] = {"query": query.number}
        payload.update(query.parameter_values(params))
        payload["data"] = [row.to_dict() for row in page.slice(rows)]
        return CatalogJSONResponse(payload)

    async def api_esiti(request: Request) -> Response:
        """Run all ten queries, persist the bundle and return it."""
        params = resolve_params(request.query_params, settings.defaults)
        try:
            outcome = await run_in_threadpool(builder.build_and_store, params)
        except SnapshotNotGeneratedError as e:
            return CatalogJSONResponse(
                {"message": "Esiti non generati", "error": e.reason}, status_code=503
            )
        except SnapshotNotSavedError as e:
            return CatalogJSONResponse(
                {
                    "message": "Esiti generati ma non salvati",
                    "error": e.reason,
                    "data": e.bundle.to_dict(),
                },
                status_code=500,
            )

        return CatalogJSONResponse(
            {
                "message": "Esiti generati e salvati su file JSON",
                "saved_to": outcome.location,
                "data": outcome.bundle.to_dict(),
            }
        )

    async def api_esiti_saved(request: Request) -> Response:
        """Return the last persisted bundle."""
        try:
            bundle = await run_in_threadpool(sink.load)
        except SinkError as e:
            logger.warning("Reading saved snapshot failed: %s", e)
            return CatalogJSONResponse(
                {"message": "File JSON non leggibile", "path": sink.location, "error": e.reason},
                status_code=500,
            )
        if bundle is None:
            return CatalogJSONResponse(
                {"message": "File JSON non ancora generato", "path": sink.location},
                status_code=404,
            )
        return CatalogJSONResponse({"path": sink.location, "data": bundle.to_dict()})

    async def health(request: Request) -> Response:
        return CatalogJSONResponse({"status": "ok"})

    routes = [
        Route("/", homepage),
        Route("/health", health),
        Route("/api/esiti", api_esiti),
        Route("/api/esiti/saved", api_esiti_saved),
        Route("/api/{label}", api_query),
        Route("/{label}", short_query),
    ]

    return Starlette(routes=routes)
