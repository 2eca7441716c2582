# src/cache/dedup.py — v1
"""Time-windowed query deduplication.

Identical queries issued while one is still in flight share a single
``asyncio.Task``: the computation runs once and every waiter observes the
same result or the same exception.

Entry lifecycle:
  1. First caller for a fingerprint invokes the computation and registers
     its task with the current monotonic timestamp.
  2. Later callers with the same fingerprint attach to that task.
  3. The entry is dropped as soon as the task settles, or once it is older
     than the dedup window (checked lazily on lookup and by a periodic
     sweep), whichever comes first.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from typing import Any, Awaitable, Callable, TypeVar

from storegate.cache.models import PendingEntry, QueryKey

T = TypeVar("T")

DEFAULT_WINDOW_MS = 1000
DEFAULT_SWEEP_INTERVAL_MS = 5000

logger = logging.getLogger(__name__)


class QueryDeduplicator:
    """Share one in-flight result among identical concurrent queries."""

    def __init__(
        self,
        window_ms: int = DEFAULT_WINDOW_MS,
        sweep_interval_ms: int = DEFAULT_SWEEP_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if window_ms <= 0 or sweep_interval_ms <= 0:
            raise ValueError("window_ms and sweep_interval_ms must be > 0")
        self._window_s = window_ms / 1000.0
        self._sweep_interval_s = sweep_interval_ms / 1000.0
        self._clock = clock
        self._pending: dict[str, PendingEntry] = {}
        self._sweep_task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def window_ms(self) -> int:
        return int(self._window_s * 1000)

    @property
    def closed(self) -> bool:
        return self._closed

    async def deduplicate(
        self,
        key: QueryKey | str,
        computation: Callable[[], Awaitable[T]],
    ) -> T:
        """Run computation once per fingerprint while it is in flight.

        Args:
            key: QueryKey or precomputed fingerprint string.
            computation: Zero-argument callable returning an awaitable.

        Returns:
            The shared result.

        Raises:
            Whatever the shared computation raised, unchanged.
        """
        if self._closed:
            return await computation()

        self._ensure_sweep()
        fingerprint = key if isinstance(key, str) else key.fingerprint()

        entry = self._lookup(fingerprint)
        if entry is None:
            entry = self._register(fingerprint, computation)
        else:
            logger.debug("Dedup hit for %s (age %.3fs)", fingerprint, entry.age(self._clock()))

        # Shield so that a cancelled waiter does not cancel the shared task.
        return await asyncio.shield(entry.task)

    def pending_count(self) -> int:
        """Number of live entries."""
        return len(self._pending)

    def is_pending(self, key: QueryKey | str) -> bool:
        fingerprint = key if isinstance(key, str) else key.fingerprint()
        return self._lookup(fingerprint) is not None

    def sweep_expired(self) -> int:
        """Drop every entry older than the dedup window.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        expired = [
            fp for fp, entry in self._pending.items()
            if entry.is_expired(now, self._window_s)
        ]
        for fp in expired:
            del self._pending[fp]
        if expired:
            logger.debug("Dedup sweep evicted %d expired entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        """Drop all entries immediately (e.g. on logout)."""
        self._pending.clear()

    def close(self) -> None:
        """Stop the periodic sweep and drop all entries.

        After close() every call is a cache miss and the sweep is never
        restarted.
        """
        self._closed = True
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            self._sweep_task = None
        self._pending.clear()

    async def __aenter__(self) -> QueryDeduplicator:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    # --- Internals ---

    def _lookup(self, fingerprint: str) -> PendingEntry | None:
        entry = self._pending.get(fingerprint)
        if entry is None:
            return None
        if entry.task.done() or entry.is_expired(self._clock(), self._window_s):
            del self._pending[fingerprint]
            return None
        return entry

    def _register(
        self, fingerprint: str, computation: Callable[[], Awaitable[Any]],
    ) -> PendingEntry:
        task = asyncio.ensure_future(computation())
        entry = PendingEntry(fingerprint=fingerprint, task=task, created_at=self._clock())
        self._pending[fingerprint] = entry
        task.add_done_callback(functools.partial(self._on_settled, fingerprint))
        return entry

    def _on_settled(self, fingerprint: str, task: asyncio.Task[Any]) -> None:
        entry = self._pending.get(fingerprint)
        # A newer entry may have replaced an expired one; leave it alone.
        if entry is not None and entry.task is task:
            del self._pending[fingerprint]
        if not task.cancelled():
            # Mark the exception retrieved even if every waiter went away.
            task.exception()

    def _ensure_sweep(self) -> None:
        loop = asyncio.get_running_loop()
        task = self._sweep_task
        if task is not None and not task.done() and task.get_loop() is loop:
            return
        self._sweep_task = loop.create_task(self._sweep_loop())

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval_s)
            self.sweep_expired()
