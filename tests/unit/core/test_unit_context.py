# tests/unit/core/test_unit_context.py — v1
"""Tests for core/context.py — wiring, initialization guard, teardown."""

from __future__ import annotations

import pytest

from storegate.config.settings import Settings
from storegate.core.context import create_context
from storegate.quota.window import DailyWindow
from storegate.store.errors import ErrorKind, StoreError


class TestCreateContext:
    def test_wired_from_settings(self):
        settings = Settings(
            _env_file=None, request_log_capacity=5, quota_daily_read_limit=7, dedup_window_ms=300,
        )
        ctx = create_context(settings)
        try:
            assert ctx.request_log.capacity == 5
            assert ctx.quota_monitor.get_limits().daily_read_limit == 7
            assert ctx.deduplicator.window_ms == 300
            assert not ctx.deduplicator.closed
        finally:
            ctx.close()

    def test_dedup_disabled(self):
        ctx = create_context(Settings(_env_file=None, dedup_enabled=False))
        assert ctx.deduplicator.closed

    def test_daily_policy(self):
        ctx = create_context(Settings(_env_file=None, quota_window_policy="daily"))
        try:
            assert isinstance(ctx.quota_monitor._window_policy, DailyWindow)
        finally:
            ctx.close()

    def test_separate_contexts_are_independent(self, settings):
        a = create_context(settings)
        b = create_context(settings)
        a.tracker.track_read("users")
        assert b.quota_monitor.get_metrics().read_count == 0
        assert len(b.request_log) == 0


class TestStoreAttachment:
    def test_missing_store_raises_initialization_error(self, settings):
        ctx = create_context(settings)
        assert not ctx.is_initialized
        with pytest.raises(StoreError) as info:
            ctx.get_store()
        assert info.value.kind is ErrorKind.INITIALIZATION

    def test_attach(self, settings, memory_store):
        ctx = create_context(settings)
        ctx.attach_store(memory_store)
        assert ctx.is_initialized
        assert ctx.get_store() is memory_store


class TestReset:
    def test_reset_clears_state(self, store_context):
        store_context.tracker.track_write("users", "u1")
        store_context.reset()
        assert store_context.quota_monitor.get_metrics().write_count == 0
        assert len(store_context.request_log) == 0
        assert store_context.deduplicator.pending_count() == 0

    def test_close_disables_dedup(self, store_context):
        store_context.close()
        assert store_context.deduplicator.closed
