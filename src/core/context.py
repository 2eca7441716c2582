# src/core/context.py — v1
"""Application-level owner of the coordination services.

One StoreContext per application (or per test) replaces process-wide
singletons: repositories receive it by constructor injection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from storegate.cache.dedup import QueryDeduplicator
from storegate.config.settings import Settings
from storegate.quota.models import QuotaLimits
from storegate.quota.monitor import QuotaMonitor
from storegate.quota.window import create_window_policy
from storegate.store.base_store import BaseDocumentStore
from storegate.store.errors import StoreError
from storegate.tracking.request_log import RequestLog
from storegate.tracking.tracker import OperationTracker

logger = logging.getLogger(__name__)


@dataclass
class StoreContext:
    """Deduplicator, quota monitor, request log and tracker for one store."""

    settings: Settings
    deduplicator: QueryDeduplicator
    quota_monitor: QuotaMonitor
    request_log: RequestLog
    tracker: OperationTracker
    store: BaseDocumentStore | None = field(default=None)

    def attach_store(self, store: BaseDocumentStore) -> None:
        self.store = store

    def get_store(self) -> BaseDocumentStore:
        """The attached backend.

        Raises:
            StoreError: (kind INITIALIZATION) if no backend is attached.
        """
        if self.store is None:
            raise StoreError.initialization(
                "Document store is not initialized. Attach a backend with attach_store() first."
            )
        return self.store

    @property
    def is_initialized(self) -> bool:
        return self.store is not None

    def reset(self) -> None:
        """Drop pending queries, zero quota counters and empty the request log."""
        self.deduplicator.clear()
        self.quota_monitor.reset_metrics()
        self.request_log.clear_logs()

    def close(self) -> None:
        """Stop background work. The context keeps working without dedup."""
        self.deduplicator.close()


def create_context(
    settings: Settings | None = None,
    store: BaseDocumentStore | None = None,
) -> StoreContext:
    """Build a StoreContext from settings.

    Args:
        settings: Application settings. Loaded from .env if None.
        store: Optional backend to attach immediately.

    Returns:
        Fully wired StoreContext.
    """
    settings = settings or Settings()

    deduplicator = QueryDeduplicator(
        window_ms=settings.dedup_window_ms,
        sweep_interval_ms=settings.dedup_sweep_interval_ms,
    )
    if not settings.dedup_enabled:
        deduplicator.close()

    quota_monitor = QuotaMonitor(
        limits=QuotaLimits(
            daily_read_limit=settings.quota_daily_read_limit,
            daily_write_limit=settings.quota_daily_write_limit,
            daily_delete_limit=settings.quota_daily_delete_limit,
        ),
        window_policy=create_window_policy(settings.quota_window_policy),
    )
    request_log = RequestLog(capacity=settings.request_log_capacity)

    logger.debug(
        "Store context created: dedup=%s window=%dms log_capacity=%d policy=%s",
        settings.dedup_enabled, settings.dedup_window_ms,
        settings.request_log_capacity, settings.quota_window_policy,
    )
    return StoreContext(
        settings=settings,
        deduplicator=deduplicator,
        quota_monitor=quota_monitor,
        request_log=request_log,
        tracker=OperationTracker(quota_monitor, request_log),
        store=store,
    )
