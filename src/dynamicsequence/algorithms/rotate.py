"""
In-place reordering: rotate and reverse.
"""
from __future__ import annotations

import logging
import operator
from typing import TYPE_CHECKING

from dynamicsequence.algorithms.kernels import reverse_range
from dynamicsequence.utils import normalize_shift

if TYPE_CHECKING:
    from dynamicsequence.model.sequence import DynamicSequence

logger = logging.getLogger(__name__)


def rotate(sequence: DynamicSequence, k: int) -> DynamicSequence:
    """
    Shift every element left by `k` positions, wrapping around, in place.

    `k` may be negative (shift right) or larger than the length; it is taken
    modulo len. Uses the three-reversal method: reverse [0, k), reverse
    [k, n), reverse [0, n). Every element moves O(1) times, so the cost is
    O(n) independent of k.

    Args:
        sequence: The sequence to rotate.
        k: Left shift amount.

    Returns:
        The same sequence, for chaining.

    Raises:
        TypeError: If `k` is not an integer.

    **Example**:

        rotate(DynamicSequence.from_iterable([1, 2, 3, 4, 5]), 2).to_list()
        # Output: [3, 4, 5, 1, 2]
    """
    k = operator.index(k)
    n = len(sequence)
    shift = normalize_shift(k, n)
    if shift == 0:
        return sequence

    buffer = sequence._live()
    moves = reverse_range(buffer, 0, shift)
    moves += reverse_range(buffer, shift, n)
    moves += reverse_range(buffer, 0, n)
    logger.debug(f"Rotated {n} elements left by {shift} ({moves} moves)")
    sequence._touch(shifted=moves)
    return sequence


def reverse(sequence: DynamicSequence) -> DynamicSequence:
    """Reverse the element order in place."""
    n = len(sequence)
    if n < 2:
        return sequence
    moves = reverse_range(sequence._live(), 0, n)
    sequence._touch(shifted=moves)
    return sequence
