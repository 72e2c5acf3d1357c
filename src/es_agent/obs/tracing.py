"""In-memory tool call tracing and latency summaries."""

from __future__ import annotations

import threading
from collections import Counter, deque

from es_agent.types import ToolTrace


class ToolTraceStore:
    """Keeps the most recent tool traces for API-level observability.

    Usable directly as a registry observer: `registry.set_observer(store.record)`.
    """

    def __init__(self, max_records: int = 1000) -> None:
        self._records: deque[ToolTrace] = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def record(self, trace: ToolTrace) -> None:
        with self._lock:
            self._records.append(trace)

    def list_recent(self, limit: int = 20) -> list[ToolTrace]:
        with self._lock:
            records = list(self._records)
        return records[-limit:] if limit > 0 else []

    def summary(self) -> dict[str, float | int | dict[str, int]]:
        """Aggregate call counts and latency for dashboard display."""
        with self._lock:
            records = list(self._records)
        total = len(records)
        if total == 0:
            return {
                "total_calls": 0,
                "error_calls": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "calls_by_tool": {},
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        return {
            "total_calls": total,
            "error_calls": sum(1 for record in records if record.is_error),
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "calls_by_tool": dict(Counter(record.name for record in records)),
        }
