# src/tracking/models.py — v2
"""Request tracking models: RequestLogEntry, RequestStats, TrackedOperation."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

OperationType = Literal["read", "write", "delete", "listen"]

OPERATION_TYPES: tuple[OperationType, ...] = ("read", "write", "delete", "listen")


class RequestLogEntry(BaseModel):
    """One completed store operation. Immutable once logged."""

    model_config = ConfigDict(frozen=True)

    id: str
    operation_type: OperationType
    resource_name: str
    document_id: str | None = None
    started_at: datetime
    duration_ms: float | None = None
    succeeded: bool
    error_message: str | None = None
    served_from_cache: bool = False

    @property
    def target(self) -> str:
        """``collection`` or ``collection/document_id``."""
        if self.document_id:
            return f"{self.resource_name}/{self.document_id}"
        return self.resource_name


class RequestStats(BaseModel):
    """Aggregate over the current request log window."""

    total_requests: int = 0
    read_requests: int = 0
    write_requests: int = 0
    delete_requests: int = 0
    listen_requests: int = 0
    cached_requests: int = 0
    failed_requests: int = 0
    average_duration_ms: float = 0.0


class TrackedOperation(BaseModel):
    """Metadata describing an operation run through the OperationTracker."""

    model_config = ConfigDict(frozen=True)

    operation_type: OperationType
    resource_name: str
    document_id: str | None = None
    count: int = Field(default=1, ge=1)
    served_from_cache: bool = False
