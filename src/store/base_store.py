# src/store/base_store.py — v1
"""Abstract document store client interface.

The remote store's transport, authentication and persistence are the
backend's concern. Backend errors should expose ``code`` / ``message``
attributes so that storegate.store.errors can classify them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from storegate.store.models import DocumentSnapshot, QuerySnapshot
from storegate.store.query import QueryDescriptor


class BaseDocumentStore(ABC):
    """Unified interface for document store backends."""

    @abstractmethod
    async def execute_query(self, query: QueryDescriptor) -> QuerySnapshot:
        """Run a query and return matching documents."""

    @abstractmethod
    async def fetch_document(
        self, collection: str, document_id: str
    ) -> DocumentSnapshot | None:
        """Fetch one document by id, or None if absent."""

    @abstractmethod
    async def set_document(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        merge: bool = False,
    ) -> None:
        """Create or overwrite (or merge into) a document."""

    @abstractmethod
    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete a document. Deleting a missing document is not an error."""
