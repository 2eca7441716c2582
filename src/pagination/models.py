# src/pagination/models.py — v1
"""Cursor pagination types: PaginationParams, PaginatedResult."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PaginationParams(BaseModel):
    """Page request. ``cursor`` is the id of the last item of the previous page."""

    limit: int | None = Field(default=None, gt=0)
    cursor: str | None = None


class PaginatedResult(BaseModel, Generic[T]):
    """One page of items plus the cursor to resume after it."""

    items: list[T] = []
    next_cursor: str | None = None
    has_more: bool = False


def empty_paginated_result() -> PaginatedResult:
    return PaginatedResult(items=[], next_cursor=None, has_more=False)
