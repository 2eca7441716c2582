# src/quota/models.py — v1
"""Quota domain models: QuotaMetrics, QuotaLimits, QuotaStatus."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from storegate.quota.limits import FREE_TIER_LIMITS


class QuotaMetrics(BaseModel):
    """Operation counts within the current quota window."""

    read_count: int = 0
    write_count: int = 0
    delete_count: int = 0
    window_started_at: datetime


class QuotaLimits(BaseModel):
    """Daily operation ceilings. Every limit must be > 0."""

    model_config = ConfigDict(frozen=True)

    daily_read_limit: int = Field(default=FREE_TIER_LIMITS["daily_reads"], gt=0)
    daily_write_limit: int = Field(default=FREE_TIER_LIMITS["daily_writes"], gt=0)
    daily_delete_limit: int = Field(default=FREE_TIER_LIMITS["daily_deletes"], gt=0)


class QuotaStatus(BaseModel):
    """Usage projection of metrics against limits. Always recomputed."""

    model_config = ConfigDict(frozen=True)

    metrics: QuotaMetrics
    limits: QuotaLimits
    read_pct: float
    write_pct: float
    delete_pct: float
    is_near_limit: bool
    is_over_limit: bool

    @property
    def max_pct(self) -> float:
        return max(self.read_pct, self.write_pct, self.delete_pct)
