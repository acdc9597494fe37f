"""
Stable two-way merge of sorted sequences.
"""
from __future__ import annotations

import operator
from typing import Any, Callable, Optional, TYPE_CHECKING

import numpy as np

from dynamicsequence.errors import ElementTypeError, PreconditionError
from dynamicsequence.model.sequence import DynamicSequence

if TYPE_CHECKING:
    import numpy.typing as npt

Less = Callable[[Any, Any], bool]


def is_sorted(values: npt.NDArray, less: Less) -> bool:
    """True when no element is strictly less than its predecessor."""
    for i in range(1, values.shape[0]):
        if less(values[i], values[i - 1]):
            return False
    return True


def merge(a: DynamicSequence, b: DynamicSequence, less: Optional[Less] = None) -> DynamicSequence:
    """
    Merge two sorted sequences into a new one of length len(a) + len(b).

    The merge is stable and A-biased: when elements compare equal, every
    element of `a` is taken before the equal elements of `b`. An element of
    `b` is taken only if it is strictly less than the current element of `a`.

    Args:
        a: First sorted input.
        b: Second sorted input, same dtype as `a`.
        less: Strict ordering used for sorting both inputs; defaults to `a < b`.

    Raises:
        ElementTypeError: If the dtypes of the inputs differ.
        PreconditionError: If either input is unsorted (checked in debug mode only).

    Returns:
        A new sequence with the settings of `a`, reserved once for the full length.
    """
    if a.dtype != b.dtype:
        raise ElementTypeError(f"Cannot merge {a.dtype} and {b.dtype} sequences.")
    less = less or operator.lt

    left = a._live()
    right = b._live()
    if a.debug or b.debug:
        if not is_sorted(left, less):
            raise PreconditionError("First merge input is not sorted.")
        if not is_sorted(right, less):
            raise PreconditionError("Second merge input is not sorted.")

    n_left, n_right = left.shape[0], right.shape[0]
    out = np.empty(n_left + n_right, dtype=a.dtype)
    i = j = k = 0
    while i < n_left and j < n_right:
        if less(right[j], left[i]):
            out[k] = right[j]
            j += 1
        else:
            out[k] = left[i]
            i += 1
        k += 1
    # at most one of the tails is non-empty
    out[k:k + n_left - i] = left[i:]
    k += n_left - i
    out[k:k + n_right - j] = right[j:]

    result = DynamicSequence(
        a.dtype,
        capacity=out.shape[0],
        element_type=a.element_type,
        growth=a.growth,
        allocator=a.allocator,
        debug=a.debug,
    )
    result.extend(out)
    return result
