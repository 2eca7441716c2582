# tests/conftest.py — v2
"""Shared test fixtures for unit and integration tests.

Every fixture builds fresh instances: no state is shared between tests.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from storegate.cache.dedup import QueryDeduplicator
from storegate.config.settings import Settings
from storegate.core.context import StoreContext, create_context
from storegate.quota.monitor import QuotaMonitor
from storegate.store.memory_store import MemoryDocumentStore
from storegate.tracking.request_log import RequestLog
from storegate.tracking.tracker import OperationTracker


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUtcNow:
    """Manually set wall clock for quota window tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_utcnow() -> FakeUtcNow:
    return FakeUtcNow()


@pytest.fixture
def settings() -> Settings:
    """Defaults only; ignores any local .env."""
    return Settings(_env_file=None)


@pytest_asyncio.fixture
async def dedup(fake_clock: FakeClock):
    d = QueryDeduplicator(window_ms=1000, sweep_interval_ms=5000, clock=fake_clock)
    yield d
    d.close()


@pytest.fixture
def quota_monitor() -> QuotaMonitor:
    return QuotaMonitor()


@pytest.fixture
def request_log() -> RequestLog:
    return RequestLog(capacity=1000)


@pytest.fixture
def tracker(quota_monitor: QuotaMonitor, request_log: RequestLog) -> OperationTracker:
    return OperationTracker(quota_monitor, request_log)


@pytest.fixture
def memory_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def store_context(settings: Settings, memory_store: MemoryDocumentStore):
    ctx: StoreContext = create_context(settings, store=memory_store)
    yield ctx
    ctx.close()
