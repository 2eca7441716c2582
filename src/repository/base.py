# src/repository/base.py — v1
"""Base repository: deduplicated, metered, logged access to a document store.

Every read goes through the QueryDeduplicator and the OperationTracker;
writes and deletes go through the tracker only. Client errors are classified
here and re-raised as StoreError, inside the shared computation so that all
deduplicated waiters receive the same StoreError instance.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, TypeVar

from storegate.cache.models import QueryKey
from storegate.core.context import StoreContext
from storegate.pagination.helper import build_result, get_fetch_limit, get_limit, has_cursor
from storegate.pagination.models import PaginatedResult, PaginationParams
from storegate.repository.mapper import map_documents
from storegate.store.base_store import BaseDocumentStore
from storegate.store.errors import ErrorKind, StoreError, wrap_error
from storegate.store.models import DocumentSnapshot, QuerySnapshot
from storegate.store.query import QueryDescriptor, QueryFilter, SortDirection
from storegate.tracking.models import TrackedOperation

T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository:
    """Common store operations for concrete repositories.

    Subclasses usually fix a collection name and add typed methods on top of
    execute_query / fetch_by_id / paginate / save / delete.
    """

    def __init__(self, context: StoreContext) -> None:
        self._context = context

    @property
    def context(self) -> StoreContext:
        return self._context

    def get_store(self) -> BaseDocumentStore:
        """Attached backend. Raises StoreError(INITIALIZATION) if none."""
        return self._context.get_store()

    def is_store_initialized(self) -> bool:
        return self._context.is_initialized

    # --- Reads ---

    async def execute_query(self, query: QueryDescriptor) -> QuerySnapshot:
        """Run a query with dedup, quota metering and request logging."""
        store = self.get_store()
        operation = TrackedOperation(operation_type="read", resource_name=query.collection)

        def refine(snapshot: QuerySnapshot) -> TrackedOperation:
            # An empty result still costs one read.
            return operation.model_copy(
                update={"count": max(1, snapshot.size), "served_from_cache": snapshot.is_from_cache}
            )

        return await self._context.deduplicator.deduplicate(
            query.query_key(),
            lambda: self._guard(
                self._context.tracker.track(operation, lambda: store.execute_query(query), refine)
            ),
        )

    async def fetch_by_id(self, collection: str, document_id: str) -> DocumentSnapshot | None:
        """Fetch one document by id (deduplicated, counts as one read)."""
        store = self.get_store()
        operation = TrackedOperation(
            operation_type="read", resource_name=collection, document_id=document_id,
        )
        key = QueryKey(collection=collection, filters={"__id__": document_id}, limit=1)
        return await self._context.deduplicator.deduplicate(
            key,
            lambda: self._guard(
                self._context.tracker.track(
                    operation, lambda: store.fetch_document(collection, document_id),
                )
            ),
        )

    async def execute_paginated_query(
        self,
        collection: str,
        params: PaginationParams | None = None,
        order_by: str = "created_at",
        direction: SortDirection = "desc",
        filters: list[QueryFilter] | None = None,
    ) -> list[DocumentSnapshot]:
        """Fetch ``page_limit + 1`` documents, resuming after the cursor document.

        An unknown cursor id is ignored and the first page is returned.
        """
        page_limit = get_limit(params, self._context.settings.pagination_default_limit)
        query = QueryDescriptor(
            collection=collection,
            filters=filters or [],
            order_by=order_by,
            direction=direction,
            limit=get_fetch_limit(page_limit),
        )

        if has_cursor(params):
            cursor = params.cursor  # type: ignore[union-attr]
            cursor_doc = await self.fetch_by_id(collection, cursor)
            if cursor_doc is not None:
                query = query.starting_after(cursor_doc.get(order_by), cursor_doc.id)
            else:
                logger.debug("Cursor %s not found in %s, starting from first page", cursor, collection)

        snapshot = await self.execute_query(query)
        return snapshot.documents

    def build_paginated_result(
        self,
        docs: list[DocumentSnapshot],
        params: PaginationParams | None,
        extract: Callable[[DocumentSnapshot], T | None],
        get_cursor: Callable[[T], str],
    ) -> PaginatedResult[T]:
        """Extract items from over-fetched docs and build the page."""
        items = map_documents(docs, extract)
        page_limit = get_limit(params, self._context.settings.pagination_default_limit)
        return build_result(items, page_limit, get_cursor)

    async def paginate(
        self,
        collection: str,
        params: PaginationParams | None,
        extract: Callable[[DocumentSnapshot], T | None],
        get_cursor: Callable[[T], str],
        order_by: str = "created_at",
        direction: SortDirection = "desc",
        filters: list[QueryFilter] | None = None,
    ) -> PaginatedResult[T]:
        """execute_paginated_query() followed by build_paginated_result()."""
        docs = await self.execute_paginated_query(
            collection, params, order_by=order_by, direction=direction, filters=filters,
        )
        return self.build_paginated_result(docs, params, extract, get_cursor)

    # --- Writes ---

    async def save(
        self, collection: str, document_id: str, data: dict[str, Any], merge: bool = False,
    ) -> None:
        store = self.get_store()
        operation = TrackedOperation(
            operation_type="write", resource_name=collection, document_id=document_id,
        )
        await self._guard(
            self._context.tracker.track(
                operation, lambda: store.set_document(collection, document_id, data, merge),
            )
        )

    async def delete(self, collection: str, document_id: str) -> None:
        store = self.get_store()
        operation = TrackedOperation(
            operation_type="delete", resource_name=collection, document_id=document_id,
        )
        await self._guard(
            self._context.tracker.track(
                operation, lambda: store.delete_document(collection, document_id),
            )
        )

    # --- Direct tracking (for operations executed outside the repository) ---

    def track_read(self, collection: str, count: int = 1, cached: bool = False) -> None:
        self._context.tracker.track_read(collection, count, cached)

    def track_write(self, collection: str, document_id: str | None = None, count: int = 1) -> None:
        self._context.tracker.track_write(collection, document_id, count)

    def track_delete(self, collection: str, document_id: str | None = None, count: int = 1) -> None:
        self._context.tracker.track_delete(collection, document_id, count)

    # --- Internals ---

    async def _guard(self, awaitable: Awaitable[T]) -> T:
        """Await and re-raise client errors as classified StoreErrors."""
        try:
            return await awaitable
        except StoreError:
            raise
        except Exception as exc:
            error = wrap_error(exc)
            if error.kind is ErrorKind.QUOTA_EXCEEDED:
                logger.error("Store quota exceeded: %s", exc)
            raise error from exc
