import asyncio

import pytest

import es_agent.server as server_module
from es_agent.agent.tools import build_registry
from es_agent.errors import ConfigurationError
from es_agent.server import create_server, handle_call_tool, to_call_tool_result
from es_agent.types import ToolResult


def test_call_tool_success_maps_fragments(fake_store) -> None:
    registry = build_registry(fake_store)

    result = asyncio.run(handle_call_tool(registry, "list_indices", {}))

    assert result.isError is False
    assert [content.text for content in result.content][0] == "Found 2 indices"
    assert all(content.type == "text" for content in result.content)


def test_call_tool_failure_is_error_result_not_fault(fake_store) -> None:
    registry = build_registry(fake_store)

    result = asyncio.run(handle_call_tool(registry, "search", {"index": "articles"}))

    assert result.isError is True
    assert len(result.content) == 1
    assert fake_store.total_calls == 0


def test_to_call_tool_result_preserves_order() -> None:
    result = to_call_tool_result(ToolResult.success("one", "two"))

    assert [content.text for content in result.content] == ["one", "two"]


def test_create_server_uses_registry(fake_store) -> None:
    server = create_server(build_registry(fake_store))

    assert server.name == "elasticsearch-mcp-server"


def _patch_startup(monkeypatch, store=None, config_error=None, serve=None) -> None:
    def _load_config():
        if config_error is not None:
            raise config_error
        return object()

    monkeypatch.setattr(server_module, "load_config", _load_config)
    monkeypatch.setattr(server_module, "build_store_client", lambda config: store)
    if serve is not None:
        monkeypatch.setattr(server_module, "serve", serve)


def test_main_exits_1_on_configuration_error(monkeypatch, caplog) -> None:
    _patch_startup(
        monkeypatch, config_error=ConfigurationError("Elasticsearch URL cannot be empty")
    )

    with pytest.raises(SystemExit) as info:
        server_module.main()

    assert info.value.code == 1
    assert "Server error: Elasticsearch URL cannot be empty" in caplog.text


def test_main_closes_session_once_and_exits_0_on_interrupt(monkeypatch, fake_store) -> None:
    close_calls = []
    original_close = fake_store.close

    def _close() -> None:
        close_calls.append(True)
        original_close()

    fake_store.close = _close

    async def _interrupted(registry) -> None:
        raise KeyboardInterrupt

    _patch_startup(monkeypatch, store=fake_store, serve=_interrupted)

    with pytest.raises(SystemExit) as info:
        server_module.main()

    assert info.value.code == 0
    assert fake_store.closed is True
    assert len(close_calls) == 1


def test_main_exits_1_when_serving_fails(monkeypatch, fake_store, caplog) -> None:
    async def _broken(registry) -> None:
        raise RuntimeError("stdio closed")

    _patch_startup(monkeypatch, store=fake_store, serve=_broken)

    with pytest.raises(SystemExit) as info:
        server_module.main()

    assert info.value.code == 1
    assert fake_store.closed is True
    assert "Server error" in caplog.text
