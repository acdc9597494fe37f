"""
In-place array kernels shared by the whole-sequence algorithms.

Numeric blocks are handled by numba-compiled loops; object blocks (and dtypes
numba has no support for) run the same swap loop in Python.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

import numba as nb

from dynamicsequence.utils import is_jit_compatible

if TYPE_CHECKING:
    import numpy as np
    import numpy.typing as npt


@nb.njit(cache=True)
def _reverse_numeric(buffer, start, stop):
    i = start
    j = stop - 1
    while i < j:
        tmp = buffer[i]
        buffer[i] = buffer[j]
        buffer[j] = tmp
        i += 1
        j -= 1


def _reverse_python(buffer: npt.NDArray, start: int, stop: int) -> None:
    i = start
    j = stop - 1
    while i < j:
        buffer[i], buffer[j] = buffer[j], buffer[i]
        i += 1
        j -= 1


def reverse_range(buffer: npt.NDArray, start: int, stop: int) -> int:
    """
    Reverse buffer[start:stop] in place by pairwise swaps.

    Args:
        buffer: Contiguous 1-D block.
        start: First index of the range.
        stop: One past the last index of the range.

    Returns:
        Number of element moves performed (two per swap).
    """
    if stop - start < 2:
        return 0
    if is_jit_compatible(buffer):
        _reverse_numeric(buffer, start, stop)
    else:
        _reverse_python(buffer, start, stop)
    return 2 * ((stop - start) // 2)
