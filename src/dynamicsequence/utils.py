from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def normalize_shift(k: int, length: int) -> int:
    """Map any left-shift amount (negative or >= length) into [0, length)."""
    if length == 0:
        return 0
    return k % length

def chunk_bounds(length: int, parts: int) -> list[tuple[int, int]]:
    """
    Split the half-open range [0, length) into at most `parts` contiguous chunks.

    Chunk sizes differ by at most one and the first chunks get the extra
    element, so the split is a pure function of (length, parts).

    Args:
        length: Number of elements to split.
        parts: Requested number of chunks (clamped to [1, length]).

    Returns:
        List of (start, stop) pairs in index order. Empty when length is 0.

    **Example**:

        chunk_bounds(5, 2)
        # Output: [(0, 3), (3, 5)]
    """
    if length <= 0:
        return []
    parts = max(1, min(parts, length))
    base, extra = divmod(length, parts)
    bounds: list[tuple[int, int]] = []
    start = 0
    for i in range(parts):
        stop = start + base + (1 if i < extra else 0)
        bounds.append((start, stop))
        start = stop
    return bounds

def zero_value(dtype: np.dtype) -> object:
    """Default fill value for a dtype: the dtype's zero, or None for object arrays."""
    if dtype.kind == "O":
        return None
    return np.zeros((), dtype=dtype)[()]

JIT_DTYPES = frozenset(np.dtype(name) for name in (
    "bool", "int8", "int16", "int32", "int64", "uint8", "uint16", "uint32", "uint64",
    "float32", "float64", "complex64", "complex128",
))

def is_jit_compatible(array: npt.NDArray) -> bool:
    """True when numba can compile kernels for the array dtype (no float16 or long double)."""
    return array.dtype in JIT_DTYPES
