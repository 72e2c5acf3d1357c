"""Built-in Elasticsearch tool implementations."""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from es_agent.agent.registry import ToolRegistry, ToolSpec
from es_agent.config import SearchConfig
from es_agent.search.projection import ResponseProjector, resolve_offset
from es_agent.search.query import QuerySynthesizer
from es_agent.store.client import StoreClient
from es_agent.store.raw import RequestExecutor
from es_agent.store.schema import SchemaIntrospector
from es_agent.types import SearchResult, ToolResult

logger = logging.getLogger(__name__)

# Only names and paths are trimmed; header values are forwarded verbatim.
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]


class _ToolInput(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ListIndicesInput(_ToolInput):
    pass


class GetMappingsInput(_ToolInput):
    index: TrimmedStr = Field(
        min_length=1,
        description="Name of the Elasticsearch index to get mappings for",
    )


class SearchInput(_ToolInput):
    index: TrimmedStr = Field(min_length=1, description="Name of the Elasticsearch index to search")
    queryBody: dict[str, Any] = Field(
        description=(
            "Complete Elasticsearch query DSL object that can include query, "
            "size, from, sort, etc."
        ),
    )

    @field_validator("queryBody")
    @classmethod
    def _json_serializable(cls, value: dict[str, Any]) -> dict[str, Any]:
        try:
            json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("queryBody must be a valid Elasticsearch query DSL object") from exc
        return value


class ExecuteApiInput(_ToolInput):
    method: Literal["GET", "POST", "PUT", "DELETE", "HEAD"] = Field(
        description="HTTP method to use for the request"
    )
    path: TrimmedStr = Field(
        min_length=1,
        description="The API endpoint path (e.g., '_search', 'my_index/_search', '_cluster/health')",
    )
    params: dict[str, Any] | None = Field(
        default=None, description="Optional URL parameters for the request"
    )
    body: dict[str, Any] | None = Field(
        default=None, description="Optional request body as a JSON object"
    )
    headers: dict[str, str] | None = Field(
        default=None, description="Optional HTTP headers for the request"
    )


class GetShardsInput(_ToolInput):
    index: TrimmedStr | None = Field(
        default=None,
        description=(
            "Optional index name to filter results. If not provided, shows shards "
            "for all indices"
        ),
    )


def register_builtin_tools(
    registry: ToolRegistry,
    store_client: StoreClient,
    *,
    search_config: SearchConfig | None = None,
) -> None:
    """Register the Elasticsearch tool set.

    Tools:
    - `list_indices`: every index with health, status and document count.
    - `get_mappings`: the field mappings of one index.
    - `search`: query DSL search with highlighting on text and vector fields.
    - `execute_es_api`: passthrough to any REST endpoint.
    - `get_shards`: shard allocation, optionally for one index.
    """

    introspector = SchemaIntrospector(store_client)
    synthesizer = QuerySynthesizer(search_config)
    projector = ResponseProjector()
    executor = RequestExecutor(store_client)

    def _list_indices(input_data: ListIndicesInput) -> ToolResult:
        indices = [info.to_dict() for info in store_client.list_indices()]
        return ToolResult.success(f"Found {len(indices)} indices", _pretty(indices))

    def _get_mappings(input_data: GetMappingsInput) -> ToolResult:
        mappings = store_client.get_mapping(input_data.index)
        return ToolResult.success(
            f"Mappings for index: {input_data.index}",
            f"Mappings for index {input_data.index}: {_pretty(mappings)}",
        )

    def _search(input_data: SearchInput) -> ToolResult:
        fields = introspector.highlightable_fields(input_data.index)
        request = synthesizer.build(input_data.index, input_data.queryBody, fields)
        logger.debug("Searching %s with %d highlight fields", input_data.index, len(fields))
        response = store_client.execute_search(request)
        fragments = projector.project(
            SearchResult.from_response(response),
            offset=resolve_offset(input_data.queryBody),
        )
        return ToolResult(content=fragments)

    def _execute_api(input_data: ExecuteApiInput) -> ToolResult:
        response = executor.execute(
            input_data.method,
            input_data.path,
            params=input_data.params,
            body=input_data.body,
            headers=input_data.headers,
        )
        return ToolResult.success(
            f"Successfully executed {input_data.method} request to {input_data.path}",
            _pretty(response),
        )

    def _get_shards(input_data: GetShardsInput) -> ToolResult:
        shards = store_client.get_shards(input_data.index or None)
        heading = "Shard information"
        if input_data.index:
            heading += f" for index: {input_data.index}"
        return ToolResult.success(heading, _pretty(shards))

    registry.register(
        ToolSpec(
            name="list_indices",
            description="List all available Elasticsearch indices",
            args_schema=ListIndicesInput,
            handler=_list_indices,
            tags=["indices"],
        )
    )
    registry.register(
        ToolSpec(
            name="get_mappings",
            description="Get field mappings for a specific Elasticsearch index",
            args_schema=GetMappingsInput,
            handler=_get_mappings,
            tags=["indices", "schema"],
        )
    )
    registry.register(
        ToolSpec(
            name="search",
            description=(
                "Perform an Elasticsearch search with the provided query DSL. "
                "Highlights are always enabled."
            ),
            args_schema=SearchInput,
            handler=_search,
            tags=["search"],
        )
    )
    registry.register(
        ToolSpec(
            name="execute_es_api",
            description="Execute any Elasticsearch API endpoint directly",
            args_schema=ExecuteApiInput,
            handler=_execute_api,
            tags=["passthrough"],
        )
    )
    registry.register(
        ToolSpec(
            name="get_shards",
            description="Get detailed shard information for indices",
            args_schema=GetShardsInput,
            handler=_get_shards,
            tags=["cluster"],
        )
    )


def build_registry(
    store_client: StoreClient,
    *,
    search_config: SearchConfig | None = None,
) -> ToolRegistry:
    registry = ToolRegistry()
    register_builtin_tools(registry, store_client, search_config=search_config)
    return registry


def _pretty(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)
