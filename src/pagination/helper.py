# src/pagination/helper.py — v1
"""Cursor-based pagination with the fetch-one-extra technique.

Callers fetch ``get_fetch_limit(page_limit)`` items ordered by a stable field,
optionally starting after the cursor document, then hand the raw batch to
``build_result``. The extra item only signals that another page exists; it
is never returned.
"""

from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from storegate.pagination.models import PaginatedResult, PaginationParams

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 10


def build_result(
    items: Sequence[T],
    page_limit: int,
    get_cursor: Callable[[T], str],
) -> PaginatedResult[T]:
    """Build a page from an over-fetched batch.

    Args:
        items: Items fetched with limit ``page_limit + 1``.
        page_limit: Requested page size.
        get_cursor: Extracts the cursor from an item.

    Returns:
        PaginatedResult trimmed to page_limit, with next_cursor set from the
        last retained item when more items exist.
    """
    has_more = len(items) > page_limit
    page = list(items[:page_limit]) if has_more else list(items)
    next_cursor = get_cursor(page[-1]) if has_more and page else None
    return PaginatedResult(items=page, next_cursor=next_cursor, has_more=has_more)


def get_limit(params: PaginationParams | None = None, default: int = DEFAULT_PAGE_LIMIT) -> int:
    """Requested page size, or default when absent."""
    if params is not None and params.limit:
        return params.limit
    return default


def get_fetch_limit(page_limit: int) -> int:
    """Page size plus one, to detect a further page."""
    return page_limit + 1


def has_cursor(params: PaginationParams | None = None) -> bool:
    """True iff params carries a non-empty cursor."""
    return bool(params is not None and params.cursor)
