# src/repository/mapper.py — v1
"""Document mapping helpers, optionally enriching each item with related data.

Documents whose extraction yields None, or whose enrichment is missing, are
skipped.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Iterable, TypeVar

from storegate.store.models import DocumentSnapshot

S = TypeVar("S")
E = TypeVar("E")
R = TypeVar("R")


def map_documents(
    docs: Iterable[DocumentSnapshot],
    extract: Callable[[DocumentSnapshot], R | None],
) -> list[R]:
    """Extract each document, dropping those that extract to None."""
    results: list[R] = []
    for doc in docs:
        item = extract(doc)
        if item is not None:
            results.append(item)
    return results


async def map_with_enrichment(
    docs: Iterable[DocumentSnapshot],
    extract: Callable[[DocumentSnapshot], S | None],
    enrichment_key: Callable[[S], str],
    fetch_enrichment: Callable[[str], Awaitable[E | None]],
    combine: Callable[[S, E], R],
) -> list[R]:
    """Extract, look up related data by key, and combine.

    Args:
        docs: Source documents.
        extract: Document -> source item (None to skip).
        enrichment_key: Source item -> key of the related record.
        fetch_enrichment: Async lookup of the related record (None to skip).
        combine: Builds the result from source item and related record.
    """
    results: list[R] = []
    for doc in docs:
        source = extract(doc)
        if source is None:
            continue
        enrichment = await fetch_enrichment(enrichment_key(source))
        if enrichment is None:
            continue
        results.append(combine(source, enrichment))
    return results


async def map_with_multiple_enrichments(
    docs: Iterable[DocumentSnapshot],
    extract: Callable[[DocumentSnapshot], S | None],
    enrichment_keys: Callable[[S], dict[str, str]],
    fetch_enrichments: Callable[[dict[str, str]], Awaitable[E | None]],
    combine: Callable[[S, E], R],
) -> list[R]:
    """Like map_with_enrichment, with several related records fetched at once."""
    results: list[R] = []
    for doc in docs:
        source = extract(doc)
        if source is None:
            continue
        enrichments = await fetch_enrichments(enrichment_keys(source))
        if enrichments is None:
            continue
        results.append(combine(source, enrichments))
    return results
