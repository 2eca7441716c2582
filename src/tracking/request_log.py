# src/tracking/request_log.py — v1
"""Bounded request log with on-demand statistics and per-entry notification.

Keeps the most recent ``capacity`` operations (oldest evicted first).
"""

from __future__ import annotations

import json
import logging
import secrets
import time
from collections import deque
from datetime import datetime, timezone
from pathlib import Path

from storegate.core.listeners import Listener, ListenerRegistry, Unsubscribe
from storegate.tracking.models import OperationType, RequestLogEntry, RequestStats

DEFAULT_CAPACITY = 1000

logger = logging.getLogger(__name__)


class RequestLog:
    """Accumulates RequestLogEntry records in a FIFO window."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self._entries: deque[RequestLogEntry] = deque(maxlen=capacity)
        self._listeners: ListenerRegistry[RequestLogEntry] = ListenerRegistry("RequestLog")

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def log_request(
        self,
        operation_type: OperationType,
        resource_name: str,
        *,
        document_id: str | None = None,
        duration_ms: float | None = None,
        succeeded: bool = True,
        error_message: str | None = None,
        served_from_cache: bool = False,
    ) -> RequestLogEntry:
        """Stamp, append and broadcast one operation.

        Returns:
            The logged entry.
        """
        entry = RequestLogEntry(
            id=_generate_id(),
            operation_type=operation_type,
            resource_name=resource_name,
            document_id=document_id,
            started_at=datetime.now(timezone.utc),
            duration_ms=duration_ms,
            succeeded=succeeded,
            error_message=error_message,
            served_from_cache=served_from_cache,
        )
        # deque(maxlen) drops the oldest entry on overflow.
        self._entries.append(entry)

        prefix = "[store cache]" if entry.served_from_cache else "[store]"
        if entry.succeeded:
            logger.debug(
                "%s ok %s: %s", prefix, entry.operation_type.upper(), entry.target,
            )
        else:
            logger.warning(
                "%s failed %s: %s (%s)",
                prefix, entry.operation_type.upper(), entry.target, entry.error_message,
            )

        self._listeners.notify(entry)
        return entry

    def get_logs(self) -> list[RequestLogEntry]:
        """All entries, oldest to newest (copy)."""
        return list(self._entries)

    def get_logs_by_type(self, operation_type: OperationType) -> list[RequestLogEntry]:
        return [e for e in self._entries if e.operation_type == operation_type]

    def get_stats(self) -> RequestStats:
        """Counts per type, cache hits, failures and mean recorded duration."""
        entries = list(self._entries)
        durations = [e.duration_ms for e in entries if e.duration_ms is not None]
        return RequestStats(
            total_requests=len(entries),
            read_requests=sum(1 for e in entries if e.operation_type == "read"),
            write_requests=sum(1 for e in entries if e.operation_type == "write"),
            delete_requests=sum(1 for e in entries if e.operation_type == "delete"),
            listen_requests=sum(1 for e in entries if e.operation_type == "listen"),
            cached_requests=sum(1 for e in entries if e.served_from_cache),
            failed_requests=sum(1 for e in entries if not e.succeeded),
            average_duration_ms=sum(durations) / len(durations) if durations else 0.0,
        )

    def clear_logs(self) -> None:
        """Empty the window. Listeners stay registered."""
        self._entries.clear()

    def add_listener(self, listener: Listener[RequestLogEntry]) -> Unsubscribe:
        """Subscribe to every logged entry. Returns a disposer."""
        return self._listeners.add(listener)

    def save(self, path: Path) -> None:
        """Save the current window to a JSON Lines file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            for entry in self._entries:
                f.write(json.dumps(entry.model_dump(mode="json")) + "\n")

    def __len__(self) -> int:
        return len(self._entries)


def _generate_id() -> str:
    """Millisecond timestamp plus random suffix, e.g. ``1760900000000-9f2c4e1ab0``."""
    return f"{time.time_ns() // 1_000_000}-{secrets.token_hex(5)}"
