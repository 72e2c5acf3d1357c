"""FastAPI entrypoint exposing the tool catalogue over HTTP."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

from fastapi import Body, FastAPI, Header, Request

from es_agent import __version__
from es_agent.agent.registry import ToolRegistry
from es_agent.agent.tools import build_registry
from es_agent.config import load_config
from es_agent.obs.tracing import ToolTraceStore
from es_agent.store.client import StoreClient, build_store_client

logger = logging.getLogger(__name__)

_FORWARDED_SCHEMES = ("ApiKey ", "Basic ")


def create_app(
    store_client: StoreClient | None = None,
    *,
    trace_store: ToolTraceStore | None = None,
) -> FastAPI:
    """Build the HTTP app around one shared store session.

    Without an explicit client the session is created from the environment
    on startup and closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = None
        if app.state.store_client is None:
            owned = build_store_client(load_config())
            app.state.store_client = owned
        try:
            yield
        finally:
            if owned is not None:
                owned.close()
                app.state.store_client = None

    app = FastAPI(title="Elasticsearch Agent Tools", version=__version__, lifespan=lifespan)
    app.state.store_client = store_client
    app.state.trace_store = trace_store or ToolTraceStore()

    def _registry(request: Request, authorization: str | None) -> ToolRegistry:
        client = request.app.state.store_client
        forwarded = _forwarded_authorization(authorization)
        if forwarded and hasattr(client, "with_headers"):
            client = client.with_headers({"authorization": forwarded})
        registry = build_registry(client)
        registry.set_observer(request.app.state.trace_store.record)
        return registry

    @app.get("/health")
    def health(request: Request) -> dict[str, Any]:
        return {
            "status": "ok",
            "version": __version__,
            "store_configured": request.app.state.store_client is not None,
        }

    @app.get("/tools")
    def list_tools(request: Request) -> dict[str, Any]:
        return {"tools": _registry(request, None).tool_definitions()}

    @app.post("/tools/{name}")
    def call_tool(
        name: str,
        request: Request,
        arguments: dict[str, Any] | None = Body(default=None),
        authorization: str | None = Header(default=None),
    ) -> dict[str, Any]:
        result = _registry(request, authorization).dispatch(name, arguments)
        return result.to_dict()

    @app.get("/traces")
    def traces(request: Request, limit: int = 20) -> dict[str, Any]:
        records = request.app.state.trace_store.list_recent(limit=limit)
        return {"items": [asdict(record) for record in records]}

    @app.get("/metrics")
    def metrics(request: Request) -> dict[str, Any]:
        return request.app.state.trace_store.summary()

    return app


def _forwarded_authorization(value: str | None) -> str | None:
    if not value:
        return None
    # Some clients insist on a bearer token and prefix the real scheme with it.
    if value.startswith("Bearer "):
        inner = value[len("Bearer ") :]
        if inner.startswith(_FORWARDED_SCHEMES):
            return inner
    return value
