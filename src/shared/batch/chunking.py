"""Order-preserving chunking helper."""

from __future__ import annotations

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield contiguous groups of at most *size* items, in input order."""
    if size < 1:
        raise ValueError("size must be at least 1")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
