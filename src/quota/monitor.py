# src/quota/monitor.py — v1
"""Running quota counters with change notification.

Counters are mutated synchronously; every change notifies listeners with a
freshly computed QuotaStatus. Listener failures are isolated by the
ListenerRegistry.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from storegate.core.listeners import Listener, ListenerRegistry, Unsubscribe
from storegate.quota.calculator import calculate_status, get_default_limits
from storegate.quota.models import QuotaLimits, QuotaMetrics, QuotaStatus
from storegate.quota.window import ManualWindow, QuotaWindowPolicy

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuotaMonitor:
    """Count read/write/delete operations against daily limits."""

    def __init__(
        self,
        limits: QuotaLimits | None = None,
        window_policy: QuotaWindowPolicy | None = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._limits = limits or get_default_limits()
        self._window_policy = window_policy or ManualWindow()
        self._now = now
        self._metrics = QuotaMetrics(window_started_at=self._now())
        self._listeners: ListenerRegistry[QuotaStatus] = ListenerRegistry("QuotaMonitor")
        self._usage_state = "ok"

    # --- Counters ---

    def increment_read(self, count: int = 1) -> None:
        self._increment("read_count", count)

    def increment_write(self, count: int = 1) -> None:
        self._increment("write_count", count)

    def increment_delete(self, count: int = 1) -> None:
        self._increment("delete_count", count)

    def reset_metrics(self) -> None:
        """Zero all counters, restart the window, notify listeners once."""
        self._metrics = QuotaMetrics(window_started_at=self._now())
        logger.info("Quota metrics reset (window started %s)", self._metrics.window_started_at)
        self._notify()

    # --- Queries ---

    def get_metrics(self) -> QuotaMetrics:
        """Snapshot of the current counters."""
        return self._metrics.model_copy()

    def get_limits(self) -> QuotaLimits:
        return self._limits

    def get_status(self) -> QuotaStatus:
        """Usage status derived from a snapshot of the counters."""
        return calculate_status(self.get_metrics(), self._limits)

    def set_limits(self, **limits: int) -> QuotaLimits:
        """Override individual limits, keeping the others.

        Raises:
            ValueError: Unknown limit name.
            pydantic.ValidationError: A limit is not > 0.
        """
        unknown = set(limits) - set(QuotaLimits.model_fields)
        if unknown:
            raise ValueError(f"Unknown quota limit(s): {', '.join(sorted(unknown))}")
        self._limits = QuotaLimits(**{**self._limits.model_dump(), **limits})
        return self._limits

    # --- Listeners ---

    def add_listener(self, listener: Listener[QuotaStatus]) -> Unsubscribe:
        """Subscribe to status changes. Returns a disposer."""
        return self._listeners.add(listener)

    # --- Internals ---

    def _increment(self, field: str, count: int) -> None:
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")
        if self._window_policy.should_reset(self._metrics.window_started_at, self._now()):
            self.reset_metrics()
        setattr(self._metrics, field, getattr(self._metrics, field) + count)
        self._notify()

    def _notify(self) -> None:
        status = self.get_status()
        self._log_transition(status)
        self._listeners.notify(status)

    def _log_transition(self, status: QuotaStatus) -> None:
        if status.is_over_limit:
            state = "over"
        elif status.is_near_limit:
            state = "near"
        else:
            state = "ok"
        if state == self._usage_state:
            return
        self._usage_state = state
        if state == "over":
            logger.error(
                "Quota limit reached: reads=%.1f%% writes=%.1f%% deletes=%.1f%%",
                status.read_pct, status.write_pct, status.delete_pct,
            )
        elif state == "near":
            logger.warning(
                "Quota near limit: reads=%.1f%% writes=%.1f%% deletes=%.1f%%",
                status.read_pct, status.write_pct, status.delete_pct,
            )
