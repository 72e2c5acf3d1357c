from es_agent.agent.tools import build_registry

EXPECTED_REQUIRED = {
    "list_indices": [],
    "get_mappings": ["index"],
    "search": ["index", "queryBody"],
    "execute_es_api": ["method", "path"],
    "get_shards": [],
}


def test_tool_catalogue_and_required_arguments(fake_store) -> None:
    definitions = {
        definition["name"]: definition
        for definition in build_registry(fake_store).tool_definitions()
    }

    assert set(definitions) == set(EXPECTED_REQUIRED)
    for name, required in EXPECTED_REQUIRED.items():
        schema = definitions[name]["inputSchema"]
        assert sorted(schema.get("required", [])) == sorted(required)
        assert schema["additionalProperties"] is False
        assert definitions[name]["description"]


def test_execute_es_api_method_is_an_enum(fake_store) -> None:
    definitions = {
        definition["name"]: definition
        for definition in build_registry(fake_store).tool_definitions()
    }

    method_schema = definitions["execute_es_api"]["inputSchema"]["properties"]["method"]
    assert method_schema["enum"] == ["GET", "POST", "PUT", "DELETE", "HEAD"]


def test_search_description_mentions_highlighting(fake_store) -> None:
    spec = {spec.name: spec for spec in build_registry(fake_store).specs()}["search"]

    assert "Highlights are always enabled" in spec.description
