# src/cache/models.py — v2
"""Query deduplication models: QueryKey and PendingEntry."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


class QueryKey(BaseModel):
    """Fields that identify a query for deduplication.

    ``filters`` is either a pre-serialized predicate string or structured
    data (list/dict) serialized canonically by the fingerprint module.
    """

    model_config = ConfigDict(frozen=True)

    collection: str
    filters: Any = ""
    limit: int | None = None
    order_by: str | None = None

    def fingerprint(self) -> str:
        from storegate.cache.fingerprint import compute_fingerprint

        return compute_fingerprint(
            self.collection, self.filters, limit=self.limit, order_by=self.order_by
        )


@dataclass
class PendingEntry:
    """A shared in-flight computation registered under a fingerprint."""

    fingerprint: str
    task: asyncio.Task[Any]
    created_at: float

    def age(self, now: float) -> float:
        return now - self.created_at

    def is_expired(self, now: float, window_s: float) -> bool:
        return self.age(now) > window_s
