# src/utils/dates.py — v1
"""Datetime conversion helpers for stored timestamp fields.

Invalid or empty input yields None rather than raising. Naive datetimes
are treated as UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def iso_to_datetime(iso_string: str | None) -> datetime | None:
    """Parse an ISO-8601 string (``Z`` suffix accepted) into an aware datetime."""
    if not iso_string:
        return None
    try:
        dt = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    except ValueError:
        return None
    return _ensure_aware(dt)


def datetime_to_iso(value: datetime | str | None) -> str | None:
    """Render a datetime (or validate an ISO string) as ISO-8601."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value if iso_to_datetime(value) is not None else None
    return _ensure_aware(value).isoformat()


def to_datetime(value: Any) -> datetime | None:
    """Coerce a datetime, ISO string or epoch milliseconds into a datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _ensure_aware(value)
    if isinstance(value, str):
        return iso_to_datetime(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def current_iso() -> str:
    """Current UTC time as ISO-8601."""
    return datetime.now(timezone.utc).isoformat()


def _ensure_aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
