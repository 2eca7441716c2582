# src/tracking/tracker.py — v2
"""Operation tracking: run a store call, time it, meter quota, log it.

Each tracked call produces exactly one request log entry and, on success,
exactly one quota increment. Failures, including a failing refine hook, are
logged and re-raised unchanged. The logging context is set for the duration
of the call and restored afterwards.
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Awaitable, Callable, TypeVar

from storegate.logging.context import (
    get_context,
    reset_operation_context,
    reset_request_context,
    set_operation_context,
    set_request_context,
)
from storegate.quota.monitor import QuotaMonitor
from storegate.tracking.models import OperationType, TrackedOperation
from storegate.tracking.request_log import RequestLog

T = TypeVar("T")

logger = logging.getLogger(__name__)


class OperationTracker:
    """Couples a QuotaMonitor and a RequestLog around store operations."""

    def __init__(self, quota_monitor: QuotaMonitor, request_log: RequestLog) -> None:
        self._quota = quota_monitor
        self._log = request_log

    async def track(
        self,
        operation: TrackedOperation,
        fn: Callable[[], Awaitable[T]],
        refine: Callable[[T], TrackedOperation] | None = None,
    ) -> T:
        """Run fn and record its outcome.

        Args:
            operation: What is being executed and how many documents it counts for.
            fn: Zero-argument callable returning an awaitable.
            refine: Optional hook deriving the recorded metadata from the
                result (e.g. document count and cache flag of a snapshot).

        Returns:
            fn's result.

        Raises:
            Whatever fn or refine raised, after the failure has been logged.
        """
        request_token = None
        if get_context().request_id is None:
            request_token = set_request_context(secrets.token_hex(8))
        operation_tokens = set_operation_context(
            operation.resource_name, operation.operation_type,
        )
        try:
            return await self._run(operation, fn, refine)
        finally:
            reset_operation_context(operation_tokens)
            if request_token is not None:
                reset_request_context(request_token)

    async def _run(
        self,
        operation: TrackedOperation,
        fn: Callable[[], Awaitable[T]],
        refine: Callable[[T], TrackedOperation] | None,
    ) -> T:
        started = time.perf_counter()
        try:
            result = await fn()
            if refine is not None:
                operation = refine(result)
            self._count(operation.operation_type, operation.count)
        except Exception as exc:
            self._log.log_request(
                operation.operation_type,
                operation.resource_name,
                document_id=operation.document_id,
                duration_ms=_elapsed_ms(started),
                succeeded=False,
                error_message=str(exc) or type(exc).__name__,
                served_from_cache=False,
            )
            raise

        self._log.log_request(
            operation.operation_type,
            operation.resource_name,
            document_id=operation.document_id,
            duration_ms=_elapsed_ms(started),
            succeeded=True,
            served_from_cache=operation.served_from_cache,
        )
        return result

    # --- Direct recorders (operation already executed by the caller) ---

    def track_read(self, resource_name: str, count: int = 1, cached: bool = False) -> None:
        self._quota.increment_read(count)
        self._log.log_request("read", resource_name, served_from_cache=cached)

    def track_write(
        self, resource_name: str, document_id: str | None = None, count: int = 1,
    ) -> None:
        self._quota.increment_write(count)
        self._log.log_request("write", resource_name, document_id=document_id)

    def track_delete(
        self, resource_name: str, document_id: str | None = None, count: int = 1,
    ) -> None:
        self._quota.increment_delete(count)
        self._log.log_request("delete", resource_name, document_id=document_id)

    def track_listener(self, resource_name: str, document_id: str | None = None) -> None:
        """Record a realtime listener registration (not metered)."""
        self._log.log_request("listen", resource_name, document_id=document_id)

    def track_error(
        self,
        operation_type: OperationType,
        resource_name: str,
        error_message: str,
        document_id: str | None = None,
    ) -> None:
        self._log.log_request(
            operation_type,
            resource_name,
            document_id=document_id,
            succeeded=False,
            error_message=error_message,
        )

    def _count(self, operation_type: OperationType, count: int) -> None:
        if operation_type == "read":
            self._quota.increment_read(count)
        elif operation_type == "write":
            self._quota.increment_write(count)
        elif operation_type == "delete":
            self._quota.increment_delete(count)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0
