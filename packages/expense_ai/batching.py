"""Split a transaction list into bounded, contiguous chunks."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")

_MAX_CHUNK_SIZE_DEFAULT: int = 100


def _paginate(n_total: int, page_size: int) -> Iterable[tuple[int, int]]:
    """Yield half-open ``(base, end)`` ranges covering ``0..n_total``."""

    pages_total = math.ceil(n_total / page_size)
    for k in range(pages_total):
        base = k * page_size
        yield base, min(base + page_size, n_total)


def chunk(items: Sequence[T], max_chunk_size: int = _MAX_CHUNK_SIZE_DEFAULT) -> list[list[T]]:
    """Split ``items`` into contiguous runs of at most ``max_chunk_size``.

    Order is preserved and only the last chunk may be shorter. Empty input
    yields ``[]`` (zero chunks, not one empty chunk).
    """

    if isinstance(max_chunk_size, bool) or not isinstance(max_chunk_size, int):
        raise ValueError("max_chunk_size must be a positive integer")
    if max_chunk_size <= 0:
        raise ValueError("max_chunk_size must be a positive integer")
    return [list(items[base:end]) for base, end in _paginate(len(items), max_chunk_size)]


__all__ = ["chunk"]
