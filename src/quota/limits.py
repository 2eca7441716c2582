# src/quota/limits.py — v1
"""Quota baseline constants and threshold helpers.

Free-tier daily limits of the managed document store:
50K reads, 20K writes, 20K deletes per day, 1 GB storage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from storegate.quota.models import QuotaStatus

FREE_TIER_LIMITS: dict[str, int] = {
    "daily_reads": 50_000,
    "daily_writes": 20_000,
    "daily_deletes": 20_000,
    "storage_gb": 1,
}

# Usage ratios (0-1) at which callers should react.
WARNING_THRESHOLD = 0.80
CRITICAL_THRESHOLD = 0.95
EMERGENCY_THRESHOLD = 0.98

# Percent boundaries used by QuotaStatus flags.
NEAR_LIMIT_PCT = 80.0
OVER_LIMIT_PCT = 100.0

UsageLevel = Literal["ok", "warning", "critical", "emergency", "exceeded"]


def calculate_quota_usage(current: int, limit: int) -> float:
    """Usage ratio clamped to 1.0."""
    return min(1.0, current / limit)


def is_quota_threshold_reached(current: int, limit: int, threshold: float) -> bool:
    """True once current/limit reaches threshold (a 0-1 ratio)."""
    return calculate_quota_usage(current, limit) >= threshold


def get_remaining_quota(current: int, limit: int) -> int:
    """Operations left before the limit, never negative."""
    return max(0, limit - current)


def classify_usage(status: QuotaStatus) -> UsageLevel:
    """Map the highest usage percentage of a status onto a usage level."""
    ratio = status.max_pct / 100.0
    if ratio >= 1.0:
        return "exceeded"
    if ratio >= EMERGENCY_THRESHOLD:
        return "emergency"
    if ratio >= CRITICAL_THRESHOLD:
        return "critical"
    if ratio >= WARNING_THRESHOLD:
        return "warning"
    return "ok"
