# src/store/models.py — v1
"""Document store snapshot models returned by store backends."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class DocumentSnapshot(BaseModel):
    """A single stored document."""

    model_config = ConfigDict(frozen=True)

    id: str
    collection: str
    data: dict[str, Any]

    def get(self, field: str, default: Any = None) -> Any:
        """Field value; dotted paths address nested maps."""
        value: Any = self.data
        for part in field.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value


class QuerySnapshot(BaseModel):
    """Result of a query: matching documents and cache provenance."""

    model_config = ConfigDict(frozen=True)

    documents: list[DocumentSnapshot] = []
    is_from_cache: bool = False

    @property
    def size(self) -> int:
        return len(self.documents)

    @property
    def empty(self) -> bool:
        return not self.documents
