"""Element access, Python sequence protocol, iteration and export."""

from __future__ import annotations

import numpy as np
import pytest

from dynamicsequence import (
    DynamicSequence,
    EmptySequenceError,
    InvalidatedViewError,
    OutOfRangeError,
    PreconditionError,
)


def test_at_is_bounds_checked(make_sequence) -> None:
    sequence = make_sequence([4, 5, 6])

    assert sequence.at(0) == 4
    assert sequence.at(2) == 6
    for index in (3, -1):
        with pytest.raises(OutOfRangeError):
            sequence.at(index)


def test_at_rejects_non_integer_index(make_sequence) -> None:
    with pytest.raises(TypeError):
        make_sequence([1]).at(0.0)


def test_front_and_back(make_sequence) -> None:
    sequence = make_sequence([4, 5, 6])

    assert sequence.front() == 4
    assert sequence.back() == 6


@pytest.mark.parametrize("accessor", ["front", "back"])
def test_front_and_back_fail_on_empty(make_sequence, accessor: str) -> None:
    sequence = make_sequence([])

    with pytest.raises(EmptySequenceError) as excinfo:
        getattr(sequence, accessor)()

    assert isinstance(excinfo.value, OutOfRangeError)
    assert accessor in str(excinfo.value)


def test_unchecked_access_is_checked_in_debug_mode(make_sequence) -> None:
    sequence = make_sequence([1, 2, 3])
    sequence.reserve(10)

    assert sequence.get_unchecked(1) == 2
    with pytest.raises(PreconditionError):
        sequence.get_unchecked(3)
    with pytest.raises(PreconditionError):
        sequence.get_unchecked(-1)


def test_unchecked_access_reads_slot_directly_in_release_mode() -> None:
    sequence = DynamicSequence.from_iterable([1, 2, 3], dtype=np.int64, debug=False)

    assert sequence.get_unchecked(2) == 3
    assert not sequence.debug


def test_set_at_overwrites_without_structural_change(make_sequence) -> None:
    sequence = make_sequence([1, 2, 3])
    generation = sequence.generation

    sequence.set_at(1, 20)

    assert sequence.to_list() == [1, 20, 3]
    assert sequence.generation == generation
    with pytest.raises(OutOfRangeError):
        sequence.set_at(3, 0)


def test_getitem_supports_negative_indices_but_never_clamps(make_sequence) -> None:
    sequence = make_sequence([4, 5, 6])

    assert sequence[0] == 4
    assert sequence[-1] == 6
    assert sequence[-3] == 4
    for key in (3, -4):
        with pytest.raises(IndexError):
            sequence[key]


def test_getitem_slice_returns_new_sequence(make_sequence) -> None:
    sequence = make_sequence([0, 1, 2, 3, 4, 5])

    part = sequence[1:5:2]

    assert isinstance(part, DynamicSequence)
    assert part.dtype == sequence.dtype
    assert part.to_list() == [1, 3]
    part.append(9)
    assert sequence.to_list() == [0, 1, 2, 3, 4, 5]


def test_setitem(make_sequence) -> None:
    sequence = make_sequence([4, 5, 6])

    sequence[0] = 40
    sequence[-1] = 60

    assert sequence.to_list() == [40, 5, 60]
    with pytest.raises(IndexError):
        sequence[3] = 0


def test_iteration_is_in_index_order_and_restartable(make_sequence) -> None:
    sequence = make_sequence([3, 1, 2])

    assert list(sequence) == [3, 1, 2]
    assert list(sequence) == [3, 1, 2]
    assert list(reversed(sequence)) == [2, 1, 3]


def test_structural_mutation_invalidates_running_iteration(make_sequence) -> None:
    sequence = make_sequence([1, 2, 3])
    iterator = iter(sequence)

    assert next(iterator) == 1
    sequence.append(4)

    with pytest.raises(InvalidatedViewError):
        next(iterator)


def test_mutation_before_first_step_invalidates_iterator(make_sequence) -> None:
    sequence = make_sequence([1, 2, 3])
    iterator = iter(sequence)

    sequence.remove_at(0)

    with pytest.raises(InvalidatedViewError):
        next(iterator)


def test_mutation_after_last_element_is_still_reported(make_sequence) -> None:
    sequence = make_sequence([1])

    with pytest.raises(InvalidatedViewError):
        for value in sequence:
            sequence.append(value)


def test_element_assignment_does_not_invalidate_iteration(make_sequence) -> None:
    sequence = make_sequence([1, 2, 3])

    for i, value in enumerate(sequence):
        sequence.set_at(i, value * 10)

    assert sequence.to_list() == [10, 20, 30]


def test_contains_index_and_count(make_sequence) -> None:
    sequence = make_sequence([5, 7, 5, 9])

    assert 7 in sequence
    assert 8 not in sequence
    assert sequence.index(5) == 0
    assert sequence.index(5, 1) == 2
    assert sequence.count(5) == 2
    with pytest.raises(ValueError):
        sequence.index(8)


@pytest.mark.parametrize(
    "args, expected",
    [
        ((2, -1), 3),
        ((2, -3), 1),
        ((2, 0, -1), 1),
        ((2, -10), 1),
        ((2, 2, 100), 3),
    ],
)
def test_index_bounds_follow_list_semantics(make_sequence, args, expected) -> None:
    values = [1, 2, 3, 2]
    sequence = make_sequence(values)

    assert values.index(*args) == expected
    assert sequence.index(*args) == expected


def test_index_negative_stop_excludes_tail(make_sequence) -> None:
    sequence = make_sequence([1, 2, 3, 2])

    with pytest.raises(ValueError):
        sequence.index(3, 0, -2)


def test_equality(make_sequence) -> None:
    sequence = make_sequence([1, 2, 3])

    assert sequence == [1, 2, 3]
    assert sequence == (1, 2, 3)
    assert sequence == make_sequence([1, 2, 3])
    assert sequence == make_sequence([1.0, 2.0, 3.0], dtype=np.float64)
    assert sequence != make_sequence([1, 2])
    assert sequence != [1, 2, 4]


def test_to_numpy_copy_and_read_only_view(make_sequence) -> None:
    sequence = make_sequence([1, 2, 3])

    copied = sequence.to_numpy()
    copied[0] = 100
    view = sequence.to_numpy(copy=False)

    assert sequence.at(0) == 1
    assert view.tolist() == [1, 2, 3]
    with pytest.raises(ValueError):
        view[0] = 5


def test_copy_is_independent(make_sequence) -> None:
    sequence = make_sequence([1, 2, 3])

    clone = sequence.copy()
    clone.append(4)

    assert sequence.to_list() == [1, 2, 3]
    assert clone.to_list() == [1, 2, 3, 4]
    assert clone.debug == sequence.debug


@pytest.mark.parametrize(
    "values, kind",
    [
        ([1, 2, 3], "i"),
        ([1.5, 2.0], "f"),
        ([True, False], "b"),
        (["a", "b"], "O"),
        ([(1, "a"), (2, "b")], "O"),
        ([], "f"),
    ],
)
def test_from_iterable_infers_dtype(values: list, kind: str) -> None:
    sequence = DynamicSequence.from_iterable(values)

    assert sequence.dtype.kind == kind
    assert sequence.to_list() == values


def test_from_iterable_copies_another_sequence(make_sequence) -> None:
    source = make_sequence([1, 2], dtype=np.int16)

    sequence = DynamicSequence.from_iterable(source)

    assert sequence.dtype == np.int16
    assert sequence == source


def test_repr_summarises_contents(make_sequence) -> None:
    sequence = make_sequence(range(12))

    text = repr(sequence)

    assert text.startswith("DynamicSequence([0, 1, 2")
    assert "..." in text
    assert "len=12" in text
