# src/quota/window.py — v1
"""Quota window policies: decide when running counters roll over.

The monitor asks the policy before each increment; ``ManualWindow`` never
rolls over, so counts only drop back to zero through ``reset_metrics()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone


class QuotaWindowPolicy(ABC):
    """Strategy deciding whether the current quota window is stale."""

    @abstractmethod
    def should_reset(self, window_started_at: datetime, now: datetime) -> bool:
        """True if counters started at window_started_at must be reset at now."""


class ManualWindow(QuotaWindowPolicy):
    """Counters reset only on explicit request."""

    def should_reset(self, window_started_at: datetime, now: datetime) -> bool:
        return False


class DailyWindow(QuotaWindowPolicy):
    """Counters reset when the calendar day (in tz) changes."""

    def __init__(self, tz: timezone = timezone.utc) -> None:
        self._tz = tz

    def should_reset(self, window_started_at: datetime, now: datetime) -> bool:
        return window_started_at.astimezone(self._tz).date() != now.astimezone(self._tz).date()


def create_window_policy(name: str) -> QuotaWindowPolicy:
    """Instantiate a policy by its settings name ("manual" or "daily")."""
    if name == "manual":
        return ManualWindow()
    if name == "daily":
        return DailyWindow()
    raise ValueError(f"Unsupported quota window policy: {name!r}")
