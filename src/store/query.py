# src/store/query.py — v1
"""Query descriptors and builder helpers.

Descriptors are plain data: a backend evaluates them, and the dedup layer
fingerprints them. ``in`` filters with more than MAX_IN_VALUES values are
split into an OR group of ``in`` filters of at most MAX_IN_VALUES each.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from storegate.cache.models import QueryKey

MAX_IN_VALUES = 10

FilterOperator = Literal[
    "==", "!=", "<", "<=", ">", ">=",
    "in", "not-in", "array-contains", "array-contains-any",
]
SortDirection = Literal["asc", "desc"]


class FieldFilter(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    operator: FilterOperator
    value: Any


class OrFilter(BaseModel):
    """Matches when any of its filters matches."""

    model_config = ConfigDict(frozen=True)

    filters: list[FieldFilter]


QueryFilter = Union[FieldFilter, OrFilter]


class DateRange(BaseModel):
    field: str
    start: datetime | None = None
    end: datetime | None = None


class SortSpec(BaseModel):
    field: str
    direction: SortDirection = "desc"


class QueryOptions(BaseModel):
    """Input of build_query()."""

    collection: str
    filters: list[FieldFilter] = []
    date_range: DateRange | None = None
    sort: SortSpec | None = None
    limit: int | None = Field(default=None, gt=0)
    # Value of the sort field to resume after (requires sort).
    cursor_value: Any = None


class QueryDescriptor(BaseModel):
    """Backend-neutral query."""

    model_config = ConfigDict(frozen=True)

    collection: str
    filters: list[QueryFilter] = []
    order_by: str | None = None
    direction: SortDirection = "desc"
    limit: int | None = None
    start_after: Any = None
    start_after_id: str | None = None

    def query_key(self) -> QueryKey:
        """Dedup key capturing every field that changes the result."""
        predicate: dict[str, Any] = {
            "filters": [f.model_dump(mode="json") for f in self.filters],
        }
        if self.start_after is not None or self.start_after_id is not None:
            predicate["start_after"] = [_jsonable(self.start_after), self.start_after_id]
        return QueryKey(
            collection=self.collection,
            filters=predicate,
            limit=self.limit,
            order_by=f"{self.order_by}:{self.direction}" if self.order_by else None,
        )

    def with_limit(self, limit: int) -> QueryDescriptor:
        return self.model_copy(update={"limit": limit})

    def starting_after(self, value: Any, document_id: str | None = None) -> QueryDescriptor:
        if self.order_by is None:
            raise ValueError("starting_after() requires an order_by field")
        return self.model_copy(update={"start_after": value, "start_after_id": document_id})


def build_query(options: QueryOptions) -> QueryDescriptor:
    """Build a descriptor from filters, date range, sort, cursor and limit."""
    filters: list[QueryFilter] = [_apply_field_filter(f) for f in options.filters]

    if options.date_range is not None:
        dr = options.date_range
        if dr.start is not None:
            filters.append(FieldFilter(field=dr.field, operator=">=", value=dr.start))
        if dr.end is not None:
            filters.append(FieldFilter(field=dr.field, operator="<=", value=dr.end))

    order_by = options.sort.field if options.sort else None
    direction: SortDirection = options.sort.direction if options.sort else "desc"

    if options.cursor_value is not None and order_by is None:
        raise ValueError("cursor_value requires a sort field")

    return QueryDescriptor(
        collection=options.collection,
        filters=filters,
        order_by=order_by,
        direction=direction,
        limit=options.limit,
        start_after=options.cursor_value,
    )


def create_in_filter(field: str, values: list[Any]) -> FieldFilter:
    """``in`` filter; oversized value lists are chunked by build_query()."""
    return FieldFilter(field=field, operator="in", value=list(values))


def create_equal_filter(field: str, value: Any) -> FieldFilter:
    return FieldFilter(field=field, operator="==", value=value)


def _apply_field_filter(f: FieldFilter) -> QueryFilter:
    if f.operator == "in" and isinstance(f.value, (list, tuple)) and len(f.value) > MAX_IN_VALUES:
        values = list(f.value)
        chunks = [values[i : i + MAX_IN_VALUES] for i in range(0, len(values), MAX_IN_VALUES)]
        return OrFilter(filters=[FieldFilter(field=f.field, operator="in", value=c) for c in chunks])
    return f


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value
