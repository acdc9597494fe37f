from __future__ import annotations

from typing import Callable

import numpy as np
import pytest

from dynamicsequence import AllocationError, DynamicSequence, NumpyAllocator


class SwitchableAllocator:
    """Allocator that starts failing once `fail` is set."""

    def __init__(self) -> None:
        self.fail = False
        self.calls = 0
        self._inner = NumpyAllocator()

    def allocate(self, capacity: int, dtype: np.dtype):
        self.calls += 1
        if self.fail:
            raise AllocationError(capacity, capacity * dtype.itemsize, "simulated failure")
        return self._inner.allocate(capacity, dtype)


class Tracked:
    """Element with an observable destruction side effect."""

    def __init__(self, tag: int, log: list[int]) -> None:
        self.tag = tag
        self._log = log

    def __del__(self) -> None:
        self._log.append(self.tag)


@pytest.fixture
def make_sequence() -> Callable[..., DynamicSequence]:
    def _make(values=(), dtype=np.int64, **kwargs) -> DynamicSequence:
        kwargs.setdefault("debug", True)
        return DynamicSequence.from_iterable(list(values), dtype=dtype, **kwargs)
    return _make


@pytest.fixture
def switchable_allocator() -> SwitchableAllocator:
    return SwitchableAllocator()


def snapshot(sequence: DynamicSequence) -> tuple:
    """Everything that must survive a failed operation byte for byte."""
    return (
        len(sequence),
        sequence.capacity,
        sequence.base_address,
        sequence.generation,
        sequence.to_numpy().tobytes(),
    )
