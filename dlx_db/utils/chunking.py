"""Chunking utilities for bulk and batch operations."""

from typing import List, Sequence, TypeVar

T = TypeVar('T')


def chunk(items: Sequence[T], size: int) -> List[List[T]]:
    """
    Split a sequence into consecutive chunks of at most `size` items.

    Order is preserved and only the last chunk may be shorter. An empty
    sequence yields no chunks.

    Args:
        items: The sequence to split.
        size: Maximum items per chunk. Cosmos DB caps bulk and batch
              requests at 100 operations.

    Returns:
        A list of lists, each with at most `size` items.

    Raises:
        ValueError: If size is less than 1.
    """
    if size < 1:
        raise ValueError(f"Chunk size must be a positive integer, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]
