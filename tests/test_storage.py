"""Storage & growth engine: capacity, contiguity, amortized cost and strong safety."""

from __future__ import annotations

import math
import random

import numpy as np
import pytest

from conftest import SwitchableAllocator, Tracked, snapshot
from dynamicsequence import (
    AllocationError,
    BudgetAllocator,
    DynamicSequence,
    ElementTypeError,
    GrowthPolicy,
)


def test_new_sequence_is_empty_without_storage() -> None:
    sequence = DynamicSequence(np.int64)

    assert len(sequence) == 0
    assert sequence.capacity == 0
    assert sequence.is_empty
    assert not sequence


def test_constructor_preallocates_capacity() -> None:
    sequence = DynamicSequence(np.float64, capacity=16)

    assert sequence.capacity == 16
    assert len(sequence) == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"dtype": "U8"},
        {"dtype": np.int64, "element_type": int},
        {"dtype": np.int64, "capacity": -1},
    ],
)
def test_constructor_rejects_invalid_arguments(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        DynamicSequence(**kwargs)


def test_capacity_invariant_holds_across_random_operations() -> None:
    rng = random.Random(1234)
    sequence = DynamicSequence(np.int64, debug=True)

    for _ in range(2000):
        op = rng.choice(["append", "insert", "remove", "reserve", "shrink", "erase", "resize"])
        n = len(sequence)
        if op == "append":
            sequence.append(rng.randint(-100, 100))
        elif op == "insert":
            sequence.insert_at(rng.randint(0, n), rng.randint(-100, 100))
        elif op == "remove" and n:
            sequence.remove_at(rng.randrange(n))
        elif op == "reserve":
            sequence.reserve(rng.randint(0, 64))
        elif op == "shrink":
            sequence.shrink_to_fit()
        elif op == "erase":
            sequence.bulk_erase(lambda x: x % 7 == 0)
        elif op == "resize":
            sequence.resize(rng.randint(0, 40))

        assert len(sequence) <= sequence.capacity


@pytest.mark.parametrize("dtype", [np.int8, np.int64, np.float32, np.complex128, object])
def test_elements_are_contiguous(dtype) -> None:
    sequence = DynamicSequence(dtype)
    for value in range(20):
        sequence.append(value if dtype is not object else str(value))

    for i in range(len(sequence) - 1):
        assert sequence.address(i + 1) - sequence.address(i) == sequence.itemsize
    assert sequence.address(0) == sequence.base_address


@pytest.mark.parametrize("n", [10, 1000, 100000])
@pytest.mark.parametrize("factor", [2.0, 1.5])
def test_append_cost_is_amortized_constant(n: int, factor: float) -> None:
    sequence = DynamicSequence(np.int64, growth=GrowthPolicy(factor=factor))

    for value in range(n):
        sequence.append(value)

    ratio = sequence.stats.elements_relocated / n
    # geometric series: relocated copies < n * factor / (factor - 1)
    assert ratio <= factor / (factor - 1)
    assert sequence.stats.reallocations <= math.ceil(math.log(n, factor)) + 1
    assert sequence.stats.elements_shifted == 0
    assert sequence.to_list() == list(range(n))


def test_reserve_is_noop_when_capacity_suffices() -> None:
    sequence = DynamicSequence(np.int64, capacity=10)
    generation = sequence.generation

    sequence.reserve(5)
    sequence.reserve(10)

    assert sequence.capacity == 10
    assert sequence.generation == generation
    assert sequence.stats.reallocations == 0


def test_reserve_allocates_exactly_and_keeps_elements() -> None:
    sequence = DynamicSequence.from_iterable([3, 1, 4], dtype=np.int64)

    sequence.reserve(50)

    assert sequence.capacity == 50
    assert sequence.to_list() == [3, 1, 4]
    assert sequence.stats.reallocations == 1
    assert sequence.stats.elements_relocated == 3


def test_reserve_rejects_negative() -> None:
    with pytest.raises(ValueError):
        DynamicSequence(np.int64).reserve(-1)


def test_shrink_to_fit_is_explicit_only() -> None:
    sequence = DynamicSequence.from_iterable(range(9), dtype=np.int64)
    sequence.reserve(32)
    for _ in range(6):
        sequence.remove_at(0)

    assert sequence.capacity == 32

    sequence.shrink_to_fit()

    assert sequence.capacity == 3
    assert sequence.to_list() == [6, 7, 8]


def test_shrink_to_fit_empty_releases_block() -> None:
    sequence = DynamicSequence.from_iterable([1, 2], dtype=np.int64)
    sequence.clear()

    sequence.shrink_to_fit()

    assert sequence.capacity == 0


def test_resize_grows_with_zero_or_fill_and_shrinks_without_releasing_capacity() -> None:
    sequence = DynamicSequence.from_iterable([1, 2], dtype=np.int64)

    sequence.resize(4)
    assert sequence.to_list() == [1, 2, 0, 0]

    sequence.resize(6, fill=9)
    assert sequence.to_list() == [1, 2, 0, 0, 9, 9]
    capacity = sequence.capacity

    sequence.resize(1)
    assert sequence.to_list() == [1]
    assert sequence.capacity == capacity


def test_resize_validates_fill_before_growing() -> None:
    sequence = DynamicSequence.from_iterable([1, 2], dtype=np.int64)
    before = sequence.capacity

    with pytest.raises(ElementTypeError):
        sequence.resize(10, fill=0.5)

    assert sequence.capacity == before
    assert len(sequence) == 2


def test_with_size_builds_presized_sequence() -> None:
    numbers = DynamicSequence.with_size(3, np.float64, fill=1.5)
    objects = DynamicSequence.with_size(2, object)

    assert numbers.to_list() == [1.5, 1.5, 1.5]
    assert numbers.capacity == 3
    assert objects.to_list() == [None, None]


def test_object_sequence_with_element_type_rejects_none_padding() -> None:
    sequence = DynamicSequence(object, element_type=str)

    with pytest.raises(ElementTypeError):
        sequence.resize(2)


def test_clear_keeps_capacity_and_releases_in_index_order() -> None:
    log: list[int] = []
    sequence = DynamicSequence.from_iterable([Tracked(i, log) for i in range(3)], dtype=object)
    capacity = sequence.capacity

    sequence.clear()

    assert len(sequence) == 0
    assert sequence.capacity == capacity
    assert log == [0, 1, 2]


def test_failed_reserve_leaves_sequence_unchanged(switchable_allocator: SwitchableAllocator) -> None:
    sequence = DynamicSequence(np.int64, allocator=switchable_allocator)
    sequence.extend([5, 23, 2, 17])
    before = snapshot(sequence)

    switchable_allocator.fail = True
    with pytest.raises(AllocationError):
        sequence.reserve(1000)

    assert snapshot(sequence) == before


def test_failed_growth_leaves_sequence_unchanged_for_every_growing_operation() -> None:
    # budget fits exactly four int64 slots
    sequence = DynamicSequence(np.int64, capacity=4, allocator=BudgetAllocator(max_bytes=32))
    sequence.extend([1, 2, 3, 4])
    before = snapshot(sequence)

    with pytest.raises(AllocationError):
        sequence.append(5)
    with pytest.raises(AllocationError):
        sequence.insert_at(0, 0)
    with pytest.raises(AllocationError):
        sequence.bulk_insert(2, [7, 8])
    with pytest.raises(AllocationError):
        sequence.resize(6)

    assert snapshot(sequence) == before
    assert sequence.to_list() == [1, 2, 3, 4]


def test_allocation_error_is_a_memory_error() -> None:
    sequence = DynamicSequence(np.int64, allocator=BudgetAllocator(max_bytes=0))

    with pytest.raises(MemoryError):
        sequence.append(1)

    assert len(sequence) == 0
    assert sequence.capacity == 0
