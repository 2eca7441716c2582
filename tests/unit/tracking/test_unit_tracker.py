# tests/unit/tracking/test_unit_tracker.py — v2
"""Tests for tracking/tracker.py — exactly-once logging and metering."""

from __future__ import annotations

import pytest

from storegate.logging.context import (
    clear_context,
    get_context,
    set_operation_context,
    set_request_context,
)
from storegate.tracking.models import TrackedOperation

async def _ok(value=None):
    return value

class TestTrack:
    @pytest.mark.asyncio
    async def test_success_logs_and_counts_once(self, tracker, quota_monitor, request_log):
        op = TrackedOperation(operation_type="write", resource_name="users", document_id="u1")
        result = await tracker.track(op, lambda: _ok("done"))
        assert result == "done"
        assert quota_monitor.get_metrics().write_count == 1
        logs = request_log.get_logs()
        assert len(logs) == 1
        assert logs[0].succeeded
        assert logs[0].document_id == "u1"
        assert logs[0].duration_ms is not None and logs[0].duration_ms >= 0

    @pytest.mark.asyncio
    async def test_failure_logs_once_and_reraises(self, tracker, quota_monitor, request_log):
        error = RuntimeError("permission denied")

        async def fail():
            raise error

        op = TrackedOperation(operation_type="delete", resource_name="users")
        with pytest.raises(RuntimeError) as info:
            await tracker.track(op, fail)
        assert info.value is error
        assert quota_monitor.get_metrics().delete_count == 0
        logs = request_log.get_logs()
        assert len(logs) == 1
        assert not logs[0].succeeded
        assert logs[0].error_message == "permission denied"

    @pytest.mark.asyncio
    async def test_failure_without_message_uses_type_name(self, tracker, request_log):
        async def fail():
            raise KeyError

        with pytest.raises(KeyError):
            await tracker.track(TrackedOperation(operation_type="read", resource_name="x"), fail)
        assert request_log.get_logs()[0].error_message == "KeyError"

    @pytest.mark.asyncio
    async def test_count_is_metered(self, tracker, quota_monitor):
        op = TrackedOperation(operation_type="read", resource_name="users", count=7)
        await tracker.track(op, _ok)
        assert quota_monitor.get_metrics().read_count == 7

    @pytest.mark.asyncio
    async def test_refine_overrides_metadata(self, tracker, quota_monitor, request_log):
        op = TrackedOperation(operation_type="read", resource_name="users")

        def refine(result):
            return op.model_copy(update={"count": len(result), "served_from_cache": True})

        await tracker.track(op, lambda: _ok([1, 2, 3]), refine)
        assert quota_monitor.get_metrics().read_count == 3
        assert request_log.get_logs()[0].served_from_cache

    @pytest.mark.asyncio
    async def test_listen_is_not_metered(self, tracker, quota_monitor, request_log):
        op = TrackedOperation(operation_type="listen", resource_name="users")
        await tracker.track(op, _ok)
        metrics = quota_monitor.get_metrics()
        assert (metrics.read_count, metrics.write_count, metrics.delete_count) == (0, 0, 0)
        assert request_log.get_logs()[0].operation_type == "listen"

    @pytest.mark.asyncio
    async def test_sets_operation_context(self, tracker):
        clear_context()
        seen = {}

        async def capture():
            ctx = get_context()
            seen["resource"], seen["operation"] = ctx.resource, ctx.operation

        await tracker.track(TrackedOperation(operation_type="write", resource_name="orders"), capture)
        assert seen == {"resource": "orders", "operation": "write"}
        clear_context()

    @pytest.mark.asyncio
    async def test_failing_refine_logs_one_failure(self, tracker, quota_monitor, request_log):
        op = TrackedOperation(operation_type="read", resource_name="users")

        def refine(result):
            return op.model_copy(update={"count": len(result)})

        with pytest.raises(TypeError):
            await tracker.track(op, _ok, refine)
        logs = request_log.get_logs()
        assert len(logs) == 1
        assert not logs[0].succeeded
        assert logs[0].duration_ms is not None
        assert quota_monitor.get_metrics().read_count == 0

    @pytest.mark.asyncio
    async def test_context_restored_after_success(self, tracker):
        clear_context()
        await tracker.track(TrackedOperation(operation_type="write", resource_name="orders"), _ok)
        assert get_context().as_dict() == {}

    @pytest.mark.asyncio
    async def test_context_restored_after_failure(self, tracker):
        clear_context()
        set_operation_context("outer", "listen")

        async def fail():
            raise RuntimeError("down")

        with pytest.raises(RuntimeError):
            await tracker.track(TrackedOperation(operation_type="delete", resource_name="orders"), fail)
        ctx = get_context()
        assert (ctx.resource, ctx.operation, ctx.request_id) == ("outer", "listen", None)
        clear_context()

    @pytest.mark.asyncio
    async def test_request_id_set_during_call(self, tracker):
        clear_context()
        seen = []

        async def capture():
            seen.append(get_context().request_id)

        op = TrackedOperation(operation_type="read", resource_name="orders")
        await tracker.track(op, capture)
        await tracker.track(op, capture)
        assert all(seen)
        assert seen[0] != seen[1]
        assert get_context().request_id is None

    @pytest.mark.asyncio
    async def test_outer_request_id_is_kept(self, tracker):
        clear_context()
        set_request_context("req-outer")
        seen = []

        async def capture():
            seen.append(get_context().request_id)

        await tracker.track(TrackedOperation(operation_type="read", resource_name="orders"), capture)
        assert seen == ["req-outer"]
        assert get_context().request_id == "req-outer"
        clear_context()


class TestDirectRecorders:
    def test_track_read(self, tracker, quota_monitor, request_log):
        tracker.track_read("users", count=4, cached=True)
        assert quota_monitor.get_metrics().read_count == 4
        assert request_log.get_logs()[0].served_from_cache

    def test_track_write_and_delete(self, tracker, quota_monitor, request_log):
        tracker.track_write("users", "u1")
        tracker.track_delete("users", "u1", count=2)
        metrics = quota_monitor.get_metrics()
        assert metrics.write_count == 1
        assert metrics.delete_count == 2
        assert [e.operation_type for e in request_log.get_logs()] == ["write", "delete"]

    def test_track_listener_not_metered(self, tracker, quota_monitor, request_log):
        tracker.track_listener("users", "u1")
        assert quota_monitor.get_metrics().read_count == 0
        assert request_log.get_logs()[0].target == "users/u1"

    def test_track_error(self, tracker, quota_monitor, request_log):
        tracker.track_error("write", "users", "boom", document_id="u9")
        entry = request_log.get_logs()[0]
        assert not entry.succeeded
        assert entry.error_message == "boom"
        assert quota_monitor.get_metrics().write_count == 0

    def test_invalid_count_rejected_before_logging(self, tracker, request_log):
        with pytest.raises(ValueError):
            tracker.track_read("users", count=0)
        assert len(request_log) == 0
