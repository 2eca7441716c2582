# src/cache/fingerprint.py — v4
"""Deterministic query fingerprinting for request deduplication.

A fingerprint is the canonical ``collection|filters|limit|order_by`` string.
Field order is fixed here, never by the caller; optional fields render as
the empty string so that a missing limit and a missing order_by still occupy
their slots. Backslashes and separators inside a part are backslash-escaped,
so distinct queries never join into the same string.
"""

from __future__ import annotations

import json
from typing import Any

FINGERPRINT_SEPARATOR = "|"


def compute_fingerprint(
    collection: str,
    filters: Any = "",
    limit: int | None = None,
    order_by: str | None = None,
) -> str:
    """Compute the dedup fingerprint of a query.

    Args:
        collection: Collection / resource name.
        filters: Serialized predicate string, or structured filter data.
        limit: Optional result limit.
        order_by: Optional ordering field (may include direction).

    Returns:
        Canonical fingerprint string.
    """
    parts = [
        _escape(collection),
        _escape(serialize_filters(filters)),
        "" if limit is None else str(limit),
        _escape(order_by or ""),
    ]
    return FINGERPRINT_SEPARATOR.join(parts)


def serialize_filters(filters: Any) -> str:
    """Serialize a filter predicate canonically.

    Strings pass through unchanged; None is the empty predicate; anything
    else is rendered as compact JSON with sorted keys.
    """
    if filters is None:
        return ""
    if isinstance(filters, str):
        return filters
    return json.dumps(
        filters, sort_keys=True, separators=(",", ":"), default=_jsonable
    )


def _escape(part: str) -> str:
    return part.replace("\\", "\\\\").replace(
        FINGERPRINT_SEPARATOR, "\\" + FINGERPRINT_SEPARATOR
    )


def _jsonable(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="json")
    return str(value)
