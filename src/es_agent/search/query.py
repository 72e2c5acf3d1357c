"""Builds the store-bound search request from a caller query body."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from es_agent.config import SearchConfig


class QuerySynthesizer:
    """Merges a caller query body with index, timeout and highlighting.

    Caller keys win over the defaults, except `highlight`: it is always
    derived from the highlightable fields and replaces anything supplied.
    When there is nothing to highlight the key is dropped entirely.
    """

    def __init__(self, config: SearchConfig | None = None) -> None:
        self.config = config or SearchConfig()

    def build(
        self,
        index: str,
        query_body: dict[str, Any],
        highlight_fields: Iterable[str],
    ) -> dict[str, Any]:
        request: dict[str, Any] = {
            "index": index,
            "timeout": self.config.timeout,
            **query_body,
        }
        request.pop("highlight", None)

        fields = list(dict.fromkeys(highlight_fields))
        if fields:
            request["highlight"] = {
                "fields": {name: {} for name in fields},
                "pre_tags": [self.config.pre_tag],
                "post_tags": [self.config.post_tag],
            }
        return request
