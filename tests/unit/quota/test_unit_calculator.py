# tests/unit/quota/test_unit_calculator.py — v1
"""Tests for quota/calculator.py — percentages and threshold flags."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from storegate.quota.calculator import calculate_status, get_default_limits, is_within_limits
from storegate.quota.models import QuotaLimits, QuotaMetrics

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _metrics(reads: int = 0, writes: int = 0, deletes: int = 0) -> QuotaMetrics:
    return QuotaMetrics(
        read_count=reads, write_count=writes, delete_count=deletes, window_started_at=T0,
    )


class TestCalculateStatus:
    def test_zero_usage(self):
        status = calculate_status(_metrics())
        assert status.read_pct == 0.0
        assert not status.is_near_limit
        assert not status.is_over_limit

    def test_percentages(self):
        status = calculate_status(_metrics(reads=25_000, writes=2_000, deletes=10_000))
        assert status.read_pct == pytest.approx(50.0)
        assert status.write_pct == pytest.approx(10.0)
        assert status.delete_pct == pytest.approx(50.0)

    def test_just_below_near_boundary(self):
        status = calculate_status(_metrics(reads=39_999))
        assert not status.is_near_limit

    def test_near_boundary_inclusive(self):
        status = calculate_status(_metrics(reads=40_000))
        assert status.read_pct == 80.0
        assert status.is_near_limit
        assert not status.is_over_limit

    def test_over_boundary_inclusive(self):
        status = calculate_status(_metrics(writes=20_000))
        assert status.write_pct == 100.0
        assert status.is_near_limit
        assert status.is_over_limit

    def test_percentages_are_not_clamped(self):
        status = calculate_status(_metrics(deletes=30_000))
        assert status.delete_pct == pytest.approx(150.0)

    def test_any_category_triggers(self):
        status = calculate_status(_metrics(deletes=16_000))
        assert status.is_near_limit
        assert status.max_pct == pytest.approx(80.0)

    def test_custom_limits(self):
        limits = QuotaLimits(daily_read_limit=10, daily_write_limit=10, daily_delete_limit=10)
        status = calculate_status(_metrics(reads=10), limits)
        assert status.is_over_limit
        assert status.limits is limits


class TestHelpers:
    def test_default_limits(self):
        limits = get_default_limits()
        assert limits.daily_read_limit == 50_000
        assert limits.daily_write_limit == 20_000
        assert limits.daily_delete_limit == 20_000

    def test_is_within_limits(self):
        assert is_within_limits(_metrics(reads=49_999))
        assert not is_within_limits(_metrics(reads=50_000))

    def test_limits_must_be_positive(self):
        with pytest.raises(ValueError):
            QuotaLimits(daily_read_limit=0)
