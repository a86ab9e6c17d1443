# src/logging/context.py — v1
"""Contextual logging support: attach scope, request_id and operation to log records."""

from __future__ import annotations

import contextlib
import contextvars
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per query.
_scope: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "scope", default=None
)
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    scope: str | None = None
    request_id: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        scope=_scope.get(),
        request_id=_request_id.get(),
        operation=_operation.get(),
    )


def set_request_context(request_id: str) -> None:
    """Set caller-level context (once per inbound request)."""
    _request_id.set(request_id)


def clear_context() -> None:
    """Reset all context variables."""
    _scope.set(None)
    _request_id.set(None)
    _operation.set(None)


@contextlib.contextmanager
def query_context(scope: str, operation: str) -> Iterator[None]:
    """Bind scope and operation for the duration of one query."""
    scope_token = _scope.set(scope)
    operation_token = _operation.set(operation)
    try:
        yield
    finally:
        _operation.reset(operation_token)
        _scope.reset(scope_token)
