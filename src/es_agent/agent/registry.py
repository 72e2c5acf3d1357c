"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

import logging
from collections.abc import Callable
from time import perf_counter
from typing import Any

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from es_agent.errors import AdapterError, ValidationError, format_error
from es_agent.types import ToolResult, ToolTrace

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "x-api-key"})
REDACTED = "[REDACTED]"


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[BaseModel], ToolResult]
    tags: list[str] = Field(default_factory=list)

    def validate_args(self, payload: dict[str, Any] | None) -> BaseModel:
        try:
            return self.args_schema.model_validate(payload or {})
        except PydanticValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'arguments'}: {error['msg']}"
                for error in exc.errors()
            )
            raise ValidationError(
                f"Invalid arguments for tool '{self.name}': {details}"
            ) from exc

    def invoke(self, payload: dict[str, Any] | None) -> ToolResult:
        return self.handler(self.validate_args(payload))

    def definition(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.args_schema.model_json_schema(by_alias=True),
        }


class ToolRegistry:
    """Dispatches named tool invocations into uniform tool results.

    `dispatch` never raises for expected failures: unknown tools, invalid
    arguments and store errors all come back as results with
    `is_error=True` and a single text fragment.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}
        self._observer: Callable[[ToolTrace], None] | None = None

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    def dispatch(self, name: str, payload: dict[str, Any] | None = None) -> ToolResult:
        spec = self._tools.get(name)
        if spec is None:
            logger.warning("Unknown tool requested: %s", name)
            return ToolResult.failure(f"Error: Unknown tool: {name}")
        return self._execute_spec(spec, payload or {})

    def as_langchain_tools(self) -> list[StructuredTool]:
        tools: list[StructuredTool] = []
        for spec in self._tools.values():
            tools.append(
                StructuredTool.from_function(
                    name=spec.name,
                    description=spec.description,
                    args_schema=spec.args_schema,
                    func=self._build_function(spec),
                )
            )
        return tools

    def specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def tool_definitions(self) -> list[dict[str, Any]]:
        return [spec.definition() for spec in self._tools.values()]

    def _build_function(self, spec: ToolSpec) -> Callable[..., str]:
        def _callable(**kwargs: Any) -> str:
            payload = {
                key: value for key, value in kwargs.items() if value is not None
            }
            return self._execute_spec(spec, payload).text

        return _callable

    def _execute_spec(self, spec: ToolSpec, payload: dict[str, Any]) -> ToolResult:
        start = perf_counter()
        try:
            result = spec.invoke(payload)
        except AdapterError as exc:
            logger.error("Tool %s failed: %s", spec.name, exc)
            result = ToolResult.failure(format_error(exc))
        except Exception as exc:
            logger.exception("Tool %s raised an unexpected error", spec.name)
            result = ToolResult.failure(format_error(exc))
        latency_ms = (perf_counter() - start) * 1000.0

        if self._observer is not None:
            self._observer(
                ToolTrace(
                    name=spec.name,
                    input_payload=redact_payload(payload),
                    output_preview=result.text[:320],
                    latency_ms=latency_ms,
                    is_error=result.is_error,
                )
            )
        return result


def redact_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Copy a tool payload with credential-bearing header values masked."""
    headers = payload.get("headers")
    if not isinstance(headers, dict):
        return dict(payload)
    masked = {
        key: REDACTED if str(key).lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }
    return {**payload, "headers": masked}
