"""Stdio MCP server exposing the tool registry."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Any

import mcp.types as types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from es_agent import __version__
from es_agent.agent.registry import ToolRegistry
from es_agent.agent.tools import build_registry
from es_agent.config import load_config
from es_agent.errors import ConfigurationError
from es_agent.store.client import build_store_client
from es_agent.types import ToolResult

logger = logging.getLogger(__name__)

SERVER_NAME = "elasticsearch-mcp-server"


def to_call_tool_result(result: ToolResult) -> types.CallToolResult:
    return types.CallToolResult(
        content=[
            types.TextContent(type="text", text=fragment.text)
            for fragment in result.content
        ],
        isError=result.is_error,
    )


async def handle_call_tool(
    registry: ToolRegistry, name: str, arguments: dict[str, Any] | None
) -> types.CallToolResult:
    # Store calls block; run them off the event loop so calls can overlap.
    result = await asyncio.to_thread(registry.dispatch, name, arguments)
    return to_call_tool_result(result)


def create_server(registry: ToolRegistry) -> Server:
    server: Server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=definition["name"],
                description=definition["description"],
                inputSchema=definition["inputSchema"],
            )
            for definition in registry.tool_definitions()
        ]

    # Arguments are validated by the registry so failures share one format.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
        return await handle_call_tool(registry, name, arguments)

    return server


async def serve(registry: ToolRegistry) -> None:
    server = create_server(registry)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Stdio server started, awaiting requests")
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def configure_logging() -> None:
    # stdout carries the protocol.
    logging.basicConfig(
        level=os.getenv("ES_AGENT_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stderr,
    )


def main() -> None:
    configure_logging()
    try:
        store_client = build_store_client(load_config())
    except ConfigurationError as exc:
        logger.error("Server error: %s", exc)
        sys.exit(1)
    except Exception:
        logger.exception("Server error: failed to create the Elasticsearch client")
        sys.exit(1)

    exit_code = 0
    try:
        asyncio.run(serve(build_registry(store_client)))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except Exception:
        logger.exception("Server error")
        exit_code = 1
    finally:
        store_client.close()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
