"""Field-mapping introspection used to drive highlighting."""

from __future__ import annotations

from typing import Any

from es_agent.store.client import StoreClient
from es_agent.types import FieldDescriptor

TEXT_FIELD_TYPES = frozenset({"text", "match_only_text", "search_as_you_type"})
VECTOR_MARKER = "dense_vector"


def parse_mapping(mapping: dict[str, Any]) -> dict[str, FieldDescriptor]:
    """Describe the top-level declared properties of a mapping.

    Nested object properties are kept on the descriptor but never expanded.
    """
    properties = mapping.get("properties")
    if not isinstance(properties, dict):
        return {}

    fields: dict[str, FieldDescriptor] = {}
    for name, raw in properties.items():
        raw = raw if isinstance(raw, dict) else {}
        field_type = raw.get("type")
        fields[name] = FieldDescriptor(
            name=name,
            type=field_type,
            properties=dict(raw.get("properties") or {}),
            is_vector=field_type == VECTOR_MARKER or VECTOR_MARKER in raw,
        )
    return fields


def classify(mapping: dict[str, Any]) -> list[str]:
    """Return the highlightable field names in mapping order.

    A field qualifies when its type is textual or it is marked as a vector
    embedding. A mapping without `properties` yields nothing.
    """
    return [
        descriptor.name
        for descriptor in parse_mapping(mapping).values()
        if descriptor.type in TEXT_FIELD_TYPES or descriptor.is_vector
    ]


class SchemaIntrospector:
    """Fetches an index mapping and derives its highlightable fields.

    Nothing is cached: every call reads the live mapping.
    """

    def __init__(self, store_client: StoreClient) -> None:
        self.store_client = store_client

    def highlightable_fields(self, index: str) -> list[str]:
        return classify(self.store_client.get_mapping(index))
