"""
Storage Allocators
==================
The memory provider behind every sequence. An allocator either returns a
block of exactly the requested size or raises AllocationError; it never
hands back a partial block.

Classes:
    Allocator: Protocol every memory provider implements.
    NumpyAllocator: Default provider backed by numpy.empty.
    BudgetAllocator: Provider with a hard byte budget (failure injection, quotas).
"""
from __future__ import annotations

import logging
from typing import Protocol, TYPE_CHECKING, runtime_checkable

import numpy as np

from dynamicsequence.errors import AllocationError

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@runtime_checkable
class Allocator(Protocol):
    def allocate(self, capacity: int, dtype: np.dtype) -> npt.NDArray: ...


def validate_block(block: object, capacity: int, dtype: np.dtype) -> npt.NDArray:
    """
    Check that an allocator honoured the request.

    Raises:
        AllocationError: If the block is not a 1-D C-contiguous array of
            exactly `capacity` elements of `dtype`.
    """
    nbytes = capacity * dtype.itemsize
    if not isinstance(block, np.ndarray):
        raise AllocationError(capacity, nbytes, f"allocator returned {type(block).__name__}")
    if block.ndim != 1 or block.shape[0] != capacity:
        raise AllocationError(capacity, nbytes, f"allocator returned shape {block.shape}")
    if block.dtype != dtype:
        raise AllocationError(capacity, nbytes, f"allocator returned dtype {block.dtype}")
    if not block.flags.c_contiguous:
        raise AllocationError(capacity, nbytes, "allocator returned a non-contiguous block")
    return block


class NumpyAllocator:
    """
    Allocate blocks with numpy.empty.

    Slots of numeric blocks hold arbitrary bytes until written; object blocks
    start filled with None.
    """

    def allocate(self, capacity: int, dtype: np.dtype) -> npt.NDArray:
        nbytes = capacity * dtype.itemsize
        try:
            return np.empty(capacity, dtype=dtype)
        except (MemoryError, ValueError) as e:
            # numpy raises ValueError for sizes beyond the address space
            logger.error(f"numpy could not allocate {capacity} x {dtype} ({nbytes} bytes): {e}")
            raise AllocationError(capacity, nbytes, str(e)) from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class BudgetAllocator:
    """
    Allocator with a fixed byte budget per block.

    Requests larger than `max_bytes` fail with AllocationError before any
    memory is touched. Everything else is delegated to `inner`.
    """

    def __init__(self, max_bytes: int, inner: Allocator | None = None) -> None:
        if max_bytes < 0:
            raise ValueError(f"Byte budget must be non-negative, got {max_bytes}.")
        self.max_bytes = max_bytes
        self.inner: Allocator = inner if inner is not None else NumpyAllocator()
        self.requests = 0
        self.failures = 0

    def allocate(self, capacity: int, dtype: np.dtype) -> npt.NDArray:
        self.requests += 1
        nbytes = capacity * dtype.itemsize
        if nbytes > self.max_bytes:
            self.failures += 1
            logger.error(f"Allocation of {nbytes} bytes exceeds budget of {self.max_bytes} bytes")
            raise AllocationError(capacity, nbytes, f"budget is {self.max_bytes} bytes")
        return self.inner.allocate(capacity, dtype)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(max_bytes={self.max_bytes})"


DEFAULT_ALLOCATOR: Allocator = NumpyAllocator()
