"""
Partitioning helpers for bulk operations.

DEFAULT_BATCH_SIZE balances provider rate-limit headroom, memory per batch
and batch-insert efficiency. MAX_BATCH_SIZE is a hard ceiling: larger sizes
are rejected, never clamped.
"""
import math
from typing import List, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_BATCH_SIZE = 50
MAX_BATCH_SIZE = 100


def _check_lower_bound(batch_size: int) -> None:
    if batch_size < 1:
        raise ValueError("Batch size must be at least 1")


def partition(items: Sequence[T], batch_size: int = DEFAULT_BATCH_SIZE) -> List[List[T]]:
    """
    Split items into ordered, contiguous chunks of batch_size.
    The last chunk holds the remainder.

    >>> partition(["A", "B", "C", "D", "E"], 2)
    [['A', 'B'], ['C', 'D'], ['E']]
    """
    _check_lower_bound(batch_size)
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


def calculate_batch_count(total_size: int, batch_size: int) -> int:
    _check_lower_bound(batch_size)
    return math.ceil(total_size / batch_size)


def validate_batch_size(batch_size: int) -> None:
    _check_lower_bound(batch_size)
    if batch_size > MAX_BATCH_SIZE:
        raise ValueError(
            f"Batch size {batch_size} exceeds maximum allowed size of {MAX_BATCH_SIZE}"
        )
