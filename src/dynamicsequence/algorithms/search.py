"""
Linear scans: min/max and find.

All scans are a single O(n) pass in index order. Ties go to the first
occurrence (lowest index).
"""
from __future__ import annotations

import operator
from typing import Any, Callable, Optional, TYPE_CHECKING

import numpy as np

from dynamicsequence.errors import EmptySequenceError

if TYPE_CHECKING:
    from dynamicsequence.model.sequence import DynamicSequence

Less = Callable[[Any, Any], bool]


def _fast_path(sequence: DynamicSequence, less: Optional[Less]) -> bool:
    # numpy argmin/argmax also return the first occurrence
    return less is None and sequence.dtype.kind in "biuf"


def min_index(sequence: DynamicSequence, less: Optional[Less] = None) -> int:
    """
    Index of the smallest element.

    Args:
        sequence: Sequence to scan.
        less: Strict ordering `less(a, b)`; defaults to `a < b`.

    Raises:
        EmptySequenceError: If the sequence is empty.

    Note:
        Without a comparator, float sequences are scanned by numpy and a NaN
        is reported as the minimum (first NaN wins).
    """
    if len(sequence) == 0:
        raise EmptySequenceError("min_index")
    live = sequence._live()
    if _fast_path(sequence, less):
        return int(np.argmin(live))

    less = less or operator.lt
    best = 0
    for i in range(1, live.shape[0]):
        if less(live[i], live[best]):
            best = i
    return best


def max_index(sequence: DynamicSequence, less: Optional[Less] = None) -> int:
    """Index of the largest element (first occurrence on ties). See min_index."""
    if len(sequence) == 0:
        raise EmptySequenceError("max_index")
    live = sequence._live()
    if _fast_path(sequence, less):
        return int(np.argmax(live))

    less = less or operator.lt
    best = 0
    for i in range(1, live.shape[0]):
        if less(live[best], live[i]):
            best = i
    return best


def minmax_indices(sequence: DynamicSequence, less: Optional[Less] = None) -> tuple[int, int]:
    """Indices of the smallest and largest element, found in one pass."""
    if len(sequence) == 0:
        raise EmptySequenceError("minmax_indices")
    live = sequence._live()
    less = less or operator.lt
    low = high = 0
    for i in range(1, live.shape[0]):
        item = live[i]
        if less(item, live[low]):
            low = i
        elif less(live[high], item):
            high = i
    return low, high


def min_element(sequence: DynamicSequence, less: Optional[Less] = None) -> Any:
    return sequence.at(min_index(sequence, less))


def max_element(sequence: DynamicSequence, less: Optional[Less] = None) -> Any:
    return sequence.at(max_index(sequence, less))


def find(sequence: DynamicSequence, value: Any) -> Optional[int]:
    """Index of the first element equal to `value`, or None."""
    return find_if(sequence, lambda item: bool(item == value))


def find_if(sequence: DynamicSequence, predicate: Callable[[Any], bool]) -> Optional[int]:
    """Index of the first element satisfying `predicate`, or None."""
    live = sequence._live()
    for i in range(live.shape[0]):
        if predicate(live[i]):
            return i
    return None
