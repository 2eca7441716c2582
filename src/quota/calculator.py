# src/quota/calculator.py — v1
"""Quota status calculation from metrics and limits.

Pure functions. Limits are assumed > 0 (QuotaLimits enforces it).
"""

from __future__ import annotations

from storegate.quota.limits import NEAR_LIMIT_PCT, OVER_LIMIT_PCT
from storegate.quota.models import QuotaLimits, QuotaMetrics, QuotaStatus

DEFAULT_LIMITS = QuotaLimits()


def calculate_status(
    metrics: QuotaMetrics, limits: QuotaLimits | None = None,
) -> QuotaStatus:
    """Compute usage percentages and near/over-limit flags."""
    limits = limits or DEFAULT_LIMITS
    read_pct = 100.0 * metrics.read_count / limits.daily_read_limit
    write_pct = 100.0 * metrics.write_count / limits.daily_write_limit
    delete_pct = 100.0 * metrics.delete_count / limits.daily_delete_limit
    pcts = (read_pct, write_pct, delete_pct)

    return QuotaStatus(
        metrics=metrics,
        limits=limits,
        read_pct=read_pct,
        write_pct=write_pct,
        delete_pct=delete_pct,
        is_near_limit=any(p >= NEAR_LIMIT_PCT for p in pcts),
        is_over_limit=any(p >= OVER_LIMIT_PCT for p in pcts),
    )


def get_default_limits() -> QuotaLimits:
    """Free-tier baseline limits."""
    return DEFAULT_LIMITS


def is_within_limits(metrics: QuotaMetrics, limits: QuotaLimits | None = None) -> bool:
    """True unless any counter has reached its limit."""
    return not calculate_status(metrics, limits).is_over_limit
