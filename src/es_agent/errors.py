"""Error kinds raised by the adapter layers."""

from __future__ import annotations

import json
from typing import Any


class AdapterError(Exception):
    """Base class for every expected failure of a tool operation."""


class ConfigurationError(AdapterError):
    """Connection settings are missing or inconsistent. Fatal at startup."""


class ValidationError(AdapterError):
    """Tool arguments do not match the operation's shape."""


class StoreError(AdapterError):
    """The store rejected a request or could not be reached.

    ``body`` carries the store's structured error document when one was
    returned, so callers can surface it alongside the message.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class NotFoundError(StoreError):
    """The requested index (or other resource) does not exist."""


class QueryError(StoreError):
    """The store refused a malformed query."""


class StoreTimeoutError(StoreError):
    """The request deadline elapsed before the store replied."""


def format_error(exc: BaseException) -> str:
    """Render a failure as a single message, with store detail when present."""
    message = f"Error: {exc}"
    if isinstance(exc, StoreError) and exc.body:
        message += f"\nError details: {json.dumps(exc.body, indent=2, default=str)}"
    return message
