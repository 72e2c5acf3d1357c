"""Store client interfaces and the Elasticsearch session adapter."""

from __future__ import annotations

import logging
import socket
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import urlsplit, urlunsplit

from elasticsearch import (
    ApiError,
    BadRequestError,
    ConnectionTimeout,
    Elasticsearch,
    TransportError,
)
from elasticsearch import NotFoundError as EsNotFoundError

from es_agent import __version__
from es_agent.config import ClientConfig, ElasticsearchConfig
from es_agent.errors import NotFoundError, QueryError, StoreError, StoreTimeoutError
from es_agent.types import IndexInfo

logger = logging.getLogger(__name__)

USER_AGENT = f"elastic-mcp/{__version__}"

_CONTAINER_HOST_ALIASES = (
    "host.docker.internal",
    "host.containers.internal",
)


class StoreClient(Protocol):
    """Typed calls the tool layer needs from the backing store."""

    def list_indices(self) -> list[IndexInfo]:
        """List indices with health, status and document count."""

    def get_mapping(self, index: str) -> dict[str, Any]:
        """Return the `mappings` document of an index."""

    def execute_search(self, request: dict[str, Any]) -> dict[str, Any]:
        """Run a search request; the `index` key selects the target."""

    def execute_raw(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Forward a request to the store's transport."""

    def get_shards(self, index: str | None = None) -> list[dict[str, Any]]:
        """Describe shards, optionally for a single index."""

    def close(self) -> None:
        """Release the session."""


class ElasticsearchStoreClient:
    """Adapter over a shared `elasticsearch.Elasticsearch` session.

    The underlying client pools its connections and is safe to share between
    threads, so one instance serves every concurrent tool call. Library
    exceptions are translated into the `es_agent.errors` hierarchy.
    """

    def __init__(
        self,
        client: Elasticsearch,
        config: ClientConfig | None = None,
        *,
        owns_session: bool = True,
    ) -> None:
        self._client = client
        self.config = config or ClientConfig()
        self._owns_session = owns_session
        self._closed = False

    def with_headers(self, headers: dict[str, str]) -> ElasticsearchStoreClient:
        """Return an adapter on the same session that sends extra headers."""
        return ElasticsearchStoreClient(
            self._client.options(headers=headers),
            self.config,
            owns_session=False,
        )

    def list_indices(self) -> list[IndexInfo]:
        with _translate_errors():
            response = self._metadata_client().cat.indices(format="json")
        return [
            IndexInfo(
                index=row.get("index", ""),
                health=row.get("health"),
                status=row.get("status"),
                docs_count=row.get("docs.count"),
            )
            for row in response.body
        ]

    def get_mapping(self, index: str) -> dict[str, Any]:
        with _translate_errors():
            response = self._metadata_client().indices.get_mapping(index=index)
        body = response.body
        entry = body.get(index)
        if entry is None and len(body) == 1:
            # Aliases answer under the concrete index name.
            entry = next(iter(body.values()))
        return dict((entry or {}).get("mappings") or {})

    def execute_search(self, request: dict[str, Any]) -> dict[str, Any]:
        body = dict(request)
        index = body.pop("index", None)
        with _translate_errors():
            response = self._data_client().search(index=index, body=body)
        return response.body

    def execute_raw(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        request_headers = dict(headers or {})
        lowered = {key.lower(): value for key, value in request_headers.items()}
        if "content-type" in lowered and "accept" not in lowered:
            # The store rejects a versioned Accept paired with a plain Content-Type.
            request_headers["Accept"] = lowered["content-type"]
        with _translate_errors():
            response = self._data_client().perform_request(
                method,
                f"/{path}",
                params=params or None,
                headers=request_headers or None,
                body=body,
            )
        return response.body

    def get_shards(self, index: str | None = None) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"format": "json"}
        if index:
            params["index"] = index
        with _translate_errors():
            response = self._metadata_client().cat.shards(**params)
        return list(response.body)

    def close(self) -> None:
        if self._closed or not self._owns_session:
            return
        self._closed = True
        logger.info("Closing Elasticsearch session")
        self._client.close()

    def _metadata_client(self) -> Elasticsearch:
        return self._client.options(request_timeout=self.config.metadata_timeout)

    def _data_client(self) -> Elasticsearch:
        return self._client.options(request_timeout=self.config.request_timeout)


def build_store_client(
    config: ElasticsearchConfig,
    client_config: ClientConfig | None = None,
) -> ElasticsearchStoreClient:
    """Create the process-wide store session from validated settings."""
    client_config = client_config or ClientConfig()
    url = rewrite_localhost(config.url) if config.container_mode else config.url
    logger.info("Default Elasticsearch URL: %s", url)

    kwargs: dict[str, Any] = {
        "hosts": [url],
        "max_retries": client_config.max_retries,
        "retry_on_timeout": True,
        "request_timeout": client_config.request_timeout,
        "http_compress": client_config.http_compress,
        "headers": {"user-agent": USER_AGENT},
    }

    if config.api_key:
        kwargs["api_key"] = config.api_key
        logger.info("Using configured API key authentication")
    elif config.has_basic_auth:
        kwargs["basic_auth"] = (config.username, config.password)
        logger.info("Using configured basic authentication")
    else:
        logger.info("No authentication configured")

    is_https = urlsplit(url).scheme == "https"
    if config.ssl_skip_verify and is_https:
        kwargs["verify_certs"] = False
        kwargs["ssl_show_warn"] = False
    elif config.ca_cert:
        if not is_https:
            logger.warning("Ignoring CA certificate for non-TLS URL %s", url)
        elif _read_ca_cert(config.ca_cert):
            kwargs["ca_certs"] = config.ca_cert

    return ElasticsearchStoreClient(Elasticsearch(**kwargs), client_config)


def rewrite_localhost(url: str) -> str:
    """Point `localhost` URLs at the container host when one resolves."""
    parts = urlsplit(url)
    if parts.hostname != "localhost":
        return url

    for alias in _CONTAINER_HOST_ALIASES:
        try:
            socket.getaddrinfo(alias, 80)
        except OSError:
            continue
        netloc = parts.netloc.replace("localhost", alias, 1)
        logger.info("Container mode: using '%s' instead of 'localhost'", alias)
        return urlunsplit(parts._replace(netloc=netloc))

    logger.warning("Container mode: could not find a replacement for 'localhost'")
    return url


def _read_ca_cert(path: str) -> bool:
    try:
        Path(path).read_bytes()
    except OSError as exc:
        logger.error("Failed to read certificate file: %s", exc)
        return False
    return True


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except EsNotFoundError as exc:
        raise NotFoundError(str(exc), status=exc.meta.status, body=exc.body) from exc
    except BadRequestError as exc:
        raise QueryError(str(exc), status=exc.meta.status, body=exc.body) from exc
    except ApiError as exc:
        raise StoreError(str(exc), status=exc.meta.status, body=exc.body) from exc
    except ConnectionTimeout as exc:
        raise StoreTimeoutError(str(exc)) from exc
    except TransportError as exc:
        raise StoreError(str(exc)) from exc
