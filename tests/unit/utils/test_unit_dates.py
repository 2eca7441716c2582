# tests/unit/utils/test_unit_dates.py — v1
"""Tests for utils/dates.py."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from storegate.utils.dates import current_iso, datetime_to_iso, iso_to_datetime, to_datetime

UTC_NOON = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestIsoToDatetime:
    def test_z_suffix(self):
        assert iso_to_datetime("2026-03-01T12:00:00Z") == UTC_NOON

    def test_offset_is_kept(self):
        dt = iso_to_datetime("2026-03-01T14:00:00+02:00")
        assert dt.utcoffset() == timedelta(hours=2)
        assert dt == UTC_NOON

    def test_naive_is_utc(self):
        assert iso_to_datetime("2026-03-01T12:00:00").tzinfo is timezone.utc

    @pytest.mark.parametrize("value", [None, "", "not a date"])
    def test_invalid(self, value):
        assert iso_to_datetime(value) is None


class TestDatetimeToIso:
    def test_datetime(self):
        assert datetime_to_iso(UTC_NOON) == "2026-03-01T12:00:00+00:00"

    def test_valid_string_passthrough(self):
        assert datetime_to_iso("2026-03-01T12:00:00Z") == "2026-03-01T12:00:00Z"

    def test_invalid(self):
        assert datetime_to_iso("garbage") is None
        assert datetime_to_iso(None) is None


class TestToDatetime:
    def test_epoch_millis(self):
        assert to_datetime(int(UTC_NOON.timestamp() * 1000)) == UTC_NOON

    def test_passthrough(self):
        assert to_datetime(UTC_NOON) is UTC_NOON

    def test_unsupported(self):
        assert to_datetime(True) is None
        assert to_datetime([1]) is None

    def test_current_iso_is_parseable(self):
        assert iso_to_datetime(current_iso()) is not None
