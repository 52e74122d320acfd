"""Chunking helpers for batched upstream queries."""
from __future__ import annotations

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar('T')


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield consecutive slices of ``items`` with at most ``size`` elements."""
    if size <= 0:
        raise ValueError("chunk size must be > 0")
    for i in range(0, len(items), size):
        yield list(items[i:i + size])


def unique(items: Sequence[T]) -> List[T]:
    """Order-preserving de-duplication."""
    seen = set()
    out: List[T] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        out.append(item)
    return out
