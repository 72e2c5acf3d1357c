"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass(slots=True, frozen=True)
class ContentFragment:
    """One unit of textual output in a tool result."""

    text: str
    type: Literal["text"] = "text"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "text": self.text}


@dataclass(slots=True)
class ToolResult:
    """Uniform envelope returned for every tool invocation."""

    content: list[ContentFragment]
    is_error: bool = False

    @classmethod
    def success(cls, *texts: str) -> ToolResult:
        return cls(content=[ContentFragment(text=text) for text in texts])

    @classmethod
    def failure(cls, message: str) -> ToolResult:
        return cls(content=[ContentFragment(text=message)], is_error=True)

    @property
    def text(self) -> str:
        return "\n".join(fragment.text for fragment in self.content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": [fragment.to_dict() for fragment in self.content],
            "isError": self.is_error,
        }


@dataclass(slots=True, frozen=True)
class IndexInfo:
    """A row of the index listing."""

    index: str
    health: str | None
    status: str | None
    docs_count: str | None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "index": self.index,
            "health": self.health,
            "status": self.status,
            "docsCount": self.docs_count,
        }


@dataclass(slots=True)
class FieldDescriptor:
    """Declared mapping of a single top-level field."""

    name: str
    type: str | None
    properties: dict[str, Any] = field(default_factory=dict)
    is_vector: bool = False


@dataclass(slots=True)
class SearchHit:
    """A single search hit with its source document and highlight fragments."""

    source: dict[str, Any]
    highlight: dict[str, list[str]]


@dataclass(slots=True)
class SearchResult:
    """Parsed search response consumed by the response projector."""

    hits: list[SearchHit]
    total: int
    aggregations: dict[str, Any] | None = None

    @classmethod
    def from_response(cls, body: dict[str, Any]) -> SearchResult:
        hits_section = body.get("hits") or {}
        hits = [
            SearchHit(
                source=dict(raw_hit.get("_source") or {}),
                highlight=dict(raw_hit.get("highlight") or {}),
            )
            for raw_hit in hits_section.get("hits") or []
        ]
        return cls(
            hits=hits,
            total=_resolve_total(hits_section.get("total")),
            aggregations=body.get("aggregations"),
        )


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float
    is_error: bool = False


def _resolve_total(total: Any) -> int:
    if isinstance(total, bool):
        return 0
    if isinstance(total, int):
        return total
    if isinstance(total, dict):
        return int(total.get("value") or 0)
    return 0
