"""Projects raw search responses into text content fragments."""

from __future__ import annotations

import json
from typing import Any

from es_agent.types import ContentFragment, SearchHit, SearchResult

HIGHLIGHT_SEPARATOR = " ... "


class ResponseProjector:
    """Flattens hits, totals and aggregations for an agent consumer.

    Output order is fixed: one metadata fragment, an optional aggregation
    fragment, then exactly one fragment per hit in store order.
    """

    def project(self, result: SearchResult, offset: Any = 0) -> list[ContentFragment]:
        fragments = [
            ContentFragment(
                text=(
                    f"Total results: {result.total}, "
                    f"showing {len(result.hits)} from position {offset}"
                )
            )
        ]
        if result.aggregations is not None:
            rendered = json.dumps(
                result.aggregations, indent=2, ensure_ascii=False, default=str
            )
            fragments.append(ContentFragment(text=f"Aggregation results:\n{rendered}"))
        fragments.extend(ContentFragment(text=render_hit(hit)) for hit in result.hits)
        return fragments


def render_hit(hit: SearchHit) -> str:
    lines: list[str] = []
    for field, highlights in hit.highlight.items():
        if highlights:
            lines.append(f"{field} (highlighted): {HIGHLIGHT_SEPARATOR.join(highlights)}")

    for field, value in hit.source.items():
        if field not in hit.highlight:
            lines.append(f"{field}: {_compact(value)}")
    return "\n".join(lines).strip()


def resolve_offset(query_body: dict[str, Any]) -> Any:
    """Return the caller's `from` value as given, or 0 when unset or falsy."""
    return query_body.get("from") or 0


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
