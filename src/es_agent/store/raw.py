"""Passthrough execution of arbitrary store API calls."""

from __future__ import annotations

from typing import Any

from es_agent.store.client import StoreClient

JSON_CONTENT_TYPE = "application/json"


def normalize_path(path: str) -> str:
    """Strip one leading separator from an API path."""
    return path[1:] if path.startswith("/") else path


def prepare_headers(headers: dict[str, str] | None, has_body: bool) -> dict[str, str]:
    """Default the content type to JSON when a body is sent without one."""
    prepared = dict(headers or {})
    if has_body and not any(key.lower() == "content-type" for key in prepared):
        prepared["Content-Type"] = JSON_CONTENT_TYPE
    return prepared


class RequestExecutor:
    """Forwards method/path/params/body/headers to the store unchanged."""

    def __init__(self, store_client: StoreClient) -> None:
        self.store_client = store_client

    def execute(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        return self.store_client.execute_raw(
            method,
            normalize_path(path),
            params=params or {},
            body=body,
            headers=prepare_headers(headers, body is not None),
        )
