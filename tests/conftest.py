from __future__ import annotations

from collections import Counter
from typing import Any

import pytest

from es_agent.errors import NotFoundError
from es_agent.types import IndexInfo


class FakeStoreClient:
    """In-memory store substitute that counts every call it receives."""

    def __init__(self) -> None:
        self.calls: Counter[str] = Counter()
        self.indices = [
            IndexInfo(index="articles", health="green", status="open", docs_count="2"),
            IndexInfo(index="logs", health="yellow", status="open", docs_count="10"),
        ]
        self.mappings: dict[str, dict[str, Any]] = {
            "articles": {
                "properties": {
                    "title": {"type": "text"},
                    "views": {"type": "integer"},
                    "embedding": {"type": "dense_vector", "dims": 3},
                }
            },
            "logs": {"properties": {"level": {"type": "keyword"}}},
        }
        self.search_response: dict[str, Any] = {
            "hits": {
                "total": {"value": 2, "relation": "eq"},
                "hits": [
                    {
                        "_source": {"title": "A", "views": 5},
                        "highlight": {"title": ["<em>A</em>"]},
                    },
                    {"_source": {"title": "B"}},
                ],
            }
        }
        self.raw_response: Any = {"status": "green"}
        self.raw_error: Exception | None = None
        self.shards = [{"index": "articles", "shard": "0", "prirep": "p", "state": "STARTED"}]
        self.search_requests: list[dict[str, Any]] = []
        self.raw_requests: list[dict[str, Any]] = []
        self.closed = False

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def list_indices(self) -> list[IndexInfo]:
        self.calls["list_indices"] += 1
        return list(self.indices)

    def get_mapping(self, index: str) -> dict[str, Any]:
        self.calls["get_mapping"] += 1
        if index not in self.mappings:
            raise NotFoundError(
                f"no such index [{index}]",
                status=404,
                body={"error": {"type": "index_not_found_exception"}, "status": 404},
            )
        return self.mappings[index]

    def execute_search(self, request: dict[str, Any]) -> dict[str, Any]:
        self.calls["execute_search"] += 1
        self.search_requests.append(request)
        return self.search_response

    def execute_raw(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        self.calls["execute_raw"] += 1
        self.raw_requests.append(
            {"method": method, "path": path, "params": params, "body": body, "headers": headers}
        )
        if self.raw_error is not None:
            raise self.raw_error
        return self.raw_response

    def get_shards(self, index: str | None = None) -> list[dict[str, Any]]:
        self.calls["get_shards"] += 1
        return [shard for shard in self.shards if index is None or shard["index"] == index]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_store() -> FakeStoreClient:
    return FakeStoreClient()
