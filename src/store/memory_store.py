# src/store/memory_store.py — v2
"""In-memory document store backend.

Evaluates QueryDescriptors locally. Intended for tests and local
development; documents live in a dict of collections.

Ordering ranks values by type first (null, booleans, numbers, timestamps,
strings, bytes, arrays, maps) and then by value, so a field holding mixed
types sorts deterministically instead of failing.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import Any

from storegate.store.base_store import BaseDocumentStore
from storegate.store.models import DocumentSnapshot, QuerySnapshot
from storegate.store.query import FieldFilter, OrFilter, QueryDescriptor, QueryFilter

logger = logging.getLogger(__name__)

_MISSING = object()


class StoreClientError(Exception):
    """Error shaped like a document store client error (code + message)."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class MemoryDocumentStore(BaseDocumentStore):
    """Dict-backed store evaluating filters, ordering, cursors and limits."""

    def __init__(self, serve_from_cache: bool = False) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._serve_from_cache = serve_from_cache
        self._failures: list[BaseException] = []
        self.query_count = 0

    def fail_next(self, error: BaseException) -> None:
        """Make the next operation raise error (queued, FIFO)."""
        self._failures.append(error)

    async def execute_query(self, query: QueryDescriptor) -> QuerySnapshot:
        self._raise_pending_failure()
        self.query_count += 1
        docs = [
            DocumentSnapshot(id=doc_id, collection=query.collection, data=copy.deepcopy(data))
            for doc_id, data in self._collections.get(query.collection, {}).items()
        ]
        docs = [d for d in docs if all(_matches(d, f) for f in query.filters)]

        if query.order_by is not None:
            field = query.order_by
            reverse = query.direction == "desc"
            docs = [d for d in docs if d.get(field, _MISSING) is not _MISSING]
            docs.sort(key=lambda d: (_order_key(d.get(field)), d.id), reverse=reverse)
            if query.start_after is not None:
                docs = _after_cursor(docs, field, query.start_after, query.start_after_id, reverse)

        if query.limit is not None:
            docs = docs[: query.limit]

        logger.debug("Memory query on %s returned %d documents", query.collection, len(docs))
        return QuerySnapshot(documents=docs, is_from_cache=self._serve_from_cache)

    async def fetch_document(
        self, collection: str, document_id: str
    ) -> DocumentSnapshot | None:
        self._raise_pending_failure()
        data = self._collections.get(collection, {}).get(document_id)
        if data is None:
            return None
        return DocumentSnapshot(id=document_id, collection=collection, data=copy.deepcopy(data))

    async def set_document(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        self._raise_pending_failure()
        docs = self._collections.setdefault(collection, {})
        if merge and document_id in docs:
            docs[document_id].update(copy.deepcopy(data))
        else:
            docs[document_id] = copy.deepcopy(data)

    async def delete_document(self, collection: str, document_id: str) -> None:
        self._raise_pending_failure()
        self._collections.get(collection, {}).pop(document_id, None)

    def _raise_pending_failure(self) -> None:
        if self._failures:
            raise self._failures.pop(0)


def _matches(doc: DocumentSnapshot, f: QueryFilter) -> bool:
    if isinstance(f, OrFilter):
        return any(_matches(doc, sub) for sub in f.filters)
    return _matches_field(doc, f)


def _matches_field(doc: DocumentSnapshot, f: FieldFilter) -> bool:
    actual = doc.get(f.field, _MISSING)
    if actual is _MISSING:
        return False
    op, expected = f.operator, f.value
    try:
        if op == "==":
            return actual == expected
        if op == "!=":
            return actual != expected
        if op == "<":
            return actual < expected
        if op == "<=":
            return actual <= expected
        if op == ">":
            return actual > expected
        if op == ">=":
            return actual >= expected
        if op == "in":
            return actual in expected
        if op == "not-in":
            return actual not in expected
        if op == "array-contains":
            return isinstance(actual, list) and expected in actual
        if op == "array-contains-any":
            return isinstance(actual, list) and any(v in actual for v in expected)
    except TypeError:
        # Mixed-type comparisons never match.
        return False
    raise ValueError(f"Unsupported filter operator: {op!r}")


def _after_cursor(
    docs: list[DocumentSnapshot],
    field: str,
    value: Any,
    document_id: str | None,
    reverse: bool,
) -> list[DocumentSnapshot]:
    """Documents strictly after (value, document_id) in sort order."""
    value_key = _order_key(value)
    cursor = (value_key, document_id)

    def is_after(d: DocumentSnapshot) -> bool:
        doc_value_key = _order_key(d.get(field))
        if document_id is None:
            return doc_value_key < value_key if reverse else doc_value_key > value_key
        key = (doc_value_key, d.id)
        return key < cursor if reverse else key > cursor

    return [d for d in docs if is_after(d)]


def _order_key(value: Any) -> tuple[int, Any]:
    """(type rank, comparable value) for sorting and cursor comparison."""
    if value is None:
        return 0, 0
    if isinstance(value, bool):
        return 1, value
    if isinstance(value, (int, float)):
        return 2, value
    if isinstance(value, datetime):
        return 3, value.timestamp()
    if isinstance(value, str):
        return 4, value
    if isinstance(value, bytes):
        return 5, value
    if isinstance(value, (list, tuple)):
        return 6, [_order_key(v) for v in value]
    if isinstance(value, dict):
        return 7, sorted((str(k), _order_key(v)) for k, v in value.items())
    return 8, repr(value)
