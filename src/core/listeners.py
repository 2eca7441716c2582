# src/core/listeners.py — v1
"""Synchronous observer registry with isolated listener failures.

Used by the quota monitor and the request log to broadcast state changes.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]
Unsubscribe = Callable[[], None]

logger = logging.getLogger(__name__)


class ListenerRegistry(Generic[T]):
    """Holds listeners and notifies them in registration order.

    A listener that raises is logged and skipped; the remaining listeners
    still run and the exception never reaches the notifier's caller.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._listeners: list[Listener[T]] = []

    def add(self, listener: Listener[T]) -> Unsubscribe:
        """Register a listener. Returns a disposer that removes it (idempotent)."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, value: T) -> None:
        """Call every listener with value."""
        # Snapshot so listeners may unsubscribe during notification.
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.warning(
                    "[%s] listener %r failed", self._name, listener, exc_info=True,
                )

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)
