# src/logging/context.py — v3
"""Contextual logging support: attach request_id, resource and operation to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per tracked operation.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_resource: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "resource", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)

OperationTokens = tuple[contextvars.Token, contextvars.Token]


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    resource: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        resource=_resource.get(),
        operation=_operation.get(),
    )


def set_request_context(request_id: str) -> contextvars.Token[str | None]:
    """Set the request id (called once per tracked operation).

    Returns:
        Token for reset_request_context().
    """
    return _request_id.set(request_id)


def reset_request_context(token: contextvars.Token[str | None]) -> None:
    """Restore the request id that was current before set_request_context()."""
    _request_id.reset(token)


def set_operation_context(resource: str, operation: str | None = None) -> OperationTokens:
    """Set resource/operation context (called per tracked operation).

    Returns:
        Tokens for reset_operation_context().
    """
    return _resource.set(resource), _operation.set(operation)


def reset_operation_context(tokens: OperationTokens) -> None:
    """Restore the resource/operation that were current before set_operation_context()."""
    resource_token, operation_token = tokens
    _operation.reset(operation_token)
    _resource.reset(resource_token)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _resource.set(None)
    _operation.set(None)
