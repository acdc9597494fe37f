"""
Dynamic Sequence (Core Container)
=================================
An owning, contiguous, resizable sequence of homogeneous elements.

Why is this file needed?
------------------------
1. Storage: It owns one C-contiguous numpy block of `capacity` slots. The
   first `len` slots hold the elements; the rest hold no logical value.
2. Growth: Appends and inserts reallocate geometrically (see GrowthPolicy),
   so N appends cost O(N) copies in total.
3. Safety: Every index is bounds-checked, every value is validated against
   the element dtype, and allocation happens before any state change. A
   failed operation leaves the sequence exactly as it was.

Classes:
    DynamicSequence: The container.
"""
from __future__ import annotations

import logging
import operator
from typing import Any, Callable, Iterable, Iterator, Optional, TYPE_CHECKING

import numpy as np

from dynamicsequence import config
from dynamicsequence.errors import (
    ElementTypeError,
    EmptySequenceError,
    InvalidatedViewError,
    InvariantViolation,
    OutOfRangeError,
    PreconditionError,
)
from dynamicsequence.model.allocator import Allocator, DEFAULT_ALLOCATOR, validate_block
from dynamicsequence.model.growth import GrowthPolicy, StorageStats
from dynamicsequence.model.view import ElementView
from dynamicsequence.utils import zero_value

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# bool, signed/unsigned int, float, complex, python object
SUPPORTED_KINDS = "biufcO"

_REPR_LIMIT = 10


class DynamicSequence:
    """
    Resizable contiguous sequence with a fixed element dtype.

    Numeric dtypes store raw values; the `object` dtype stores references to
    Python objects and can optionally enforce an `element_type` class.

    Structural mutations (anything that changes the length or capacity, or
    moves elements between slots) advance `generation`. Iterators and views
    compare against it to detect invalidation.

    Object slots are released in forward index order by clear(), truncation
    and erase operations.
    """

    def __init__(
        self,
        dtype: npt.DTypeLike = np.float64,
        *,
        capacity: int = 0,
        element_type: Optional[type] = None,
        growth: Optional[GrowthPolicy] = None,
        allocator: Optional[Allocator] = None,
        debug: Optional[bool] = None,
    ) -> None:
        """
        Create an empty sequence.

        Args:
            dtype: Element dtype, fixed for the lifetime of the sequence.
            capacity: Number of slots to allocate up front.
            element_type: For object dtype only, class every element must be an instance of.
            growth: Growth policy (defaults to factor 2.0, initial capacity 4).
            allocator: Memory provider (defaults to numpy.empty).
            debug: Enable stale-view, unchecked-access and invariant checks.
                Defaults to config.DEBUG_CHECKS.

        Raises:
            ValueError: For unsupported dtypes, negative capacity, or an
                element_type on a non-object dtype.
            AllocationError: If the initial block cannot be allocated.
        """
        self._dtype = np.dtype(dtype)
        if self._dtype.kind not in SUPPORTED_KINDS:
            raise ValueError(f"Unsupported element dtype '{self._dtype}'. "
                             f"Use a bool, integer, float, complex or object dtype.")
        if element_type is not None and self._dtype.kind != "O":
            raise ValueError("element_type can only be enforced for object dtype sequences.")
        if capacity < 0:
            raise ValueError(f"Capacity must be non-negative, got {capacity}.")

        self._element_type = element_type
        self._growth = growth if growth is not None else GrowthPolicy()
        self._allocator = allocator if allocator is not None else DEFAULT_ALLOCATOR
        self._debug = config.DEBUG_CHECKS if debug is None else bool(debug)
        self._stats = StorageStats()
        self._generation = 0
        self._length = 0
        self._buffer = self._allocate(capacity)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_iterable(
        cls,
        values: Iterable[Any],
        dtype: npt.DTypeLike | None = None,
        **kwargs: Any,
    ) -> DynamicSequence:
        """
        Build a sequence holding `values` in order.

        When `dtype` is omitted it is taken from a source DynamicSequence, or
        inferred by numpy; values numpy cannot pack into a flat numeric array
        (strings, tuples, mixed objects) produce an object sequence.
        """
        if isinstance(values, DynamicSequence):
            items: Any = values
            size = len(values)
            if dtype is None:
                dtype = values.dtype
        else:
            items = list(values)
            size = len(items)
            if dtype is None:
                dtype = _infer_dtype(items)

        sequence = cls(dtype, capacity=size, **kwargs)
        sequence.extend(items)
        return sequence

    @classmethod
    def with_size(
        cls,
        size: int,
        dtype: npt.DTypeLike = np.float64,
        fill: Any = None,
        **kwargs: Any,
    ) -> DynamicSequence:
        """Pre-sized sequence of `size` copies of `fill` (dtype zero / None by default)."""
        sequence = cls(dtype, capacity=size, **kwargs)
        sequence.resize(size, fill)
        return sequence

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    def __repr__(self) -> str:
        items = self._live()[:_REPR_LIMIT].tolist()
        suffix = ", ..." if self._length > _REPR_LIMIT else ""
        body = ", ".join(repr(item) for item in items)
        return (f"{self.__class__.__name__}([{body}{suffix}], dtype={self._dtype}, "
                f"len={self._length}, capacity={self.capacity})")

    def __len__(self) -> int:
        return self._length

    def __bool__(self) -> bool:
        return self._length > 0

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def element_type(self) -> Optional[type]:
        return self._element_type

    @property
    def itemsize(self) -> int:
        """Size of one slot in bytes (a pointer for object dtype)."""
        return self._dtype.itemsize

    @property
    def capacity(self) -> int:
        return self._buffer.shape[0]

    @property
    def growth(self) -> GrowthPolicy:
        return self._growth

    @property
    def allocator(self) -> Allocator:
        return self._allocator

    @property
    def stats(self) -> StorageStats:
        return self._stats

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def debug(self) -> bool:
        return self._debug

    @property
    def is_empty(self) -> bool:
        return self._length == 0

    @property
    def base_address(self) -> int:
        """Address of slot 0 of the current block. Changes on every reallocation."""
        return self._buffer.ctypes.data

    def address(self, index: int) -> int:
        """Address of element `index`: base_address + index * itemsize."""
        index = self._check_index(index, "address")
        return self.base_address + index * self.itemsize

    # ------------------------------------------------------------------
    # Storage & growth
    # ------------------------------------------------------------------
    def _allocate(self, capacity: int) -> npt.NDArray:
        block = self._allocator.allocate(capacity, self._dtype)
        return validate_block(block, capacity, self._dtype)

    def _relocate(self, new_capacity: int) -> None:
        """Move the live elements into a fresh block of `new_capacity` slots."""
        # allocate first: on failure nothing has been touched
        new_buffer = self._allocate(new_capacity)
        n = self._length
        new_buffer[:n] = self._buffer[:n]

        old_capacity = self.capacity
        self._buffer = new_buffer
        self._stats.reallocations += 1
        self._stats.elements_relocated += n
        self._generation += 1
        logger.debug(f"Reallocated {self._dtype} storage: {old_capacity} -> {new_capacity} slots, "
                     f"{n} elements relocated")

    def _grow_if_needed(self, required: int) -> None:
        if required > self.capacity:
            self._relocate(self._growth.next_capacity(self.capacity, required))

    def reserve(self, n: int) -> None:
        """
        Ensure capacity for at least `n` elements.

        A no-op when the capacity already suffices. Otherwise allocates
        exactly `n` slots and invalidates all views.

        Raises:
            ValueError: If `n` is negative.
            AllocationError: If the block cannot be allocated; the sequence is unchanged.
        """
        n = operator.index(n)
        if n < 0:
            raise ValueError(f"Cannot reserve a negative capacity ({n}).")
        if n <= self.capacity:
            return
        self._relocate(n)
        self._check_invariants()

    def shrink_to_fit(self) -> None:
        """Reallocate to exactly `len` slots. Never called implicitly."""
        if self.capacity == self._length:
            return
        logger.debug(f"Shrinking {self._dtype} storage from {self.capacity} to {self._length} slots")
        self._relocate(self._length)
        self._check_invariants()

    def resize(self, n: int, fill: Any = None) -> None:
        """
        Set the length to `n`.

        Growing fills new slots with `fill` (the dtype's zero, or None for
        object dtype, when omitted). Shrinking drops trailing elements and
        keeps the capacity.
        """
        n = operator.index(n)
        if n < 0:
            raise ValueError(f"Cannot resize to a negative length ({n}).")
        current = self._length
        if n == current:
            return

        if n < current:
            self._release_slots(n, current)
        else:
            value = self._coerce(zero_value(self._dtype) if fill is None else fill)
            self._grow_if_needed(n)
            self._fill(current, n, value)
        self._length = n
        self._touch()

    def clear(self) -> None:
        """Remove every element. Capacity is kept for reuse."""
        if self._length == 0:
            return
        self._release_slots(0, self._length)
        self._length = 0
        self._touch()

    # ------------------------------------------------------------------
    # Insertion & removal
    # ------------------------------------------------------------------
    def append(self, value: Any) -> None:
        """Place `value` at index len. Amortized O(1)."""
        value = self._coerce(value)
        self._grow_if_needed(self._length + 1)
        self._buffer[self._length] = value
        self._length += 1
        self._touch()

    def extend(self, values: Iterable[Any]) -> int:
        """Append every element of `values` in order. Returns the number added."""
        return self.bulk_insert(self._length, values)

    def insert_at(self, index: int, value: Any) -> None:
        """
        Insert `value` before position `index`, shifting the tail right.

        Args:
            index: Target position, 0 <= index <= len.
            value: Element to insert.

        Raises:
            OutOfRangeError: If index is outside [0, len].
            ElementTypeError: If value does not fit the element dtype.
        """
        n = self._length
        index = self._check_position(index, "insert_at")
        value = self._coerce(value)
        self._grow_if_needed(n + 1)

        buffer = self._buffer
        if index < n:
            # numpy copies overlapping slices as if through a temporary
            buffer[index + 1:n + 1] = buffer[index:n]
        buffer[index] = value
        self._length = n + 1
        self._touch(shifted=n - index)

    def remove_at(self, index: int) -> Any:
        """
        Remove and return the element at `index`, shifting the tail left.

        Raises:
            OutOfRangeError: If index is outside [0, len).
        """
        n = self._length
        index = self._check_index(index, "remove_at")

        buffer = self._buffer
        removed = buffer[index]
        if index < n - 1:
            buffer[index:n - 1] = buffer[index + 1:n]
        self._release_slots(n - 1, n)
        self._length = n - 1
        self._touch(shifted=n - index - 1)
        return removed

    def pop(self) -> Any:
        """Remove and return the last element."""
        if self._length == 0:
            raise EmptySequenceError("pop")
        return self.remove_at(self._length - 1)

    def bulk_insert(self, index: int, source: Iterable[Any]) -> int:
        """
        Insert all elements of `source` before position `index`, keeping their order.

        Capacity is planned once for the final length, so at most one
        reallocation happens. `source` may be this sequence itself.

        Returns:
            Number of inserted elements.
        """
        n = self._length
        index = self._check_position(index, "bulk_insert")
        block = self._coerce_many(source)
        count = block.shape[0]
        if count == 0:
            return 0

        self._grow_if_needed(n + count)
        buffer = self._buffer
        if index < n:
            buffer[index + count:n + count] = buffer[index:n]
        buffer[index:index + count] = block
        self._length = n + count
        self._touch(shifted=n - index)
        return count

    def bulk_erase(self, predicate: Callable[[Any], bool]) -> int:
        """
        Remove every element for which `predicate` holds, keeping survivor order.

        The predicate is evaluated for all elements before anything moves, so
        an exception raised by it leaves the sequence untouched. Survivors are
        then packed to the front and the length is truncated; released slots
        are no longer reachable through any valid index.

        Returns:
            Number of removed elements.
        """
        n = self._length
        live = self._live()
        keep = np.fromiter((not predicate(item) for item in live), dtype=bool, count=n)
        survivors = np.flatnonzero(keep)
        kept = survivors.shape[0]
        removed = n - kept
        if removed == 0:
            return 0

        moved = int(np.count_nonzero(survivors != np.arange(kept)))
        self._buffer[:kept] = live[survivors]
        self._release_slots(kept, n)
        self._length = kept
        self._touch(shifted=moved)
        return removed

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------
    def at(self, index: int) -> Any:
        """Bounds-checked read of element `index` (0 <= index < len)."""
        index = self._check_index(index, "at")
        return self._buffer[index]

    def get_unchecked(self, index: int) -> Any:
        """
        Fast-path read without bounds checking.

        The caller guarantees 0 <= index < len. Debug sequences verify it and
        raise PreconditionError; release sequences read the slot directly.
        """
        if self._debug and not 0 <= index < self._length:
            raise PreconditionError(f"Unchecked access at index {index} with length {self._length}.")
        return self._buffer[index]

    def set_at(self, index: int, value: Any) -> None:
        """Overwrite element `index`. Not a structural mutation."""
        index = self._check_index(index, "set_at")
        self._buffer[index] = self._coerce(value)

    def front(self) -> Any:
        if self._length == 0:
            raise EmptySequenceError("front")
        return self._buffer[0]

    def back(self) -> Any:
        if self._length == 0:
            raise EmptySequenceError("back")
        return self._buffer[self._length - 1]

    def view(self, index: int) -> ElementView:
        """Weak reference to element `index`, invalidated by structural mutation."""
        index = self._check_index(index, "view")
        return ElementView(self, index)

    def __getitem__(self, key: int | slice) -> Any:
        """
        List-style indexing.

        Integer keys accept negative values counted from the end; anything
        still outside [0, len) raises OutOfRangeError. Slices return a new
        sequence with the same dtype and settings.
        """
        if isinstance(key, slice):
            return self._spawn(self._live()[key])

        index = operator.index(key)
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise OutOfRangeError(key, self._length, "getitem")
        return self._buffer[index]

    def __setitem__(self, key: int, value: Any) -> None:
        index = operator.index(key)
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise OutOfRangeError(key, self._length, "setitem")
        self._buffer[index] = self._coerce(value)

    # ------------------------------------------------------------------
    # Iteration & search
    # ------------------------------------------------------------------
    def __iter__(self) -> Iterator[Any]:
        return self._iterate(range(self._length))

    def __reversed__(self) -> Iterator[Any]:
        return self._iterate(range(self._length - 1, -1, -1))

    def _iterate(self, indices: range) -> Iterator[Any]:
        # the generation is captured when the iterator is created, not on first next()
        return self._walk(indices, self._generation)

    def _walk(self, indices: range, generation: int) -> Iterator[Any]:
        for i in indices:
            if self._generation != generation:
                raise InvalidatedViewError("Sequence was structurally modified during iteration.")
            yield self._buffer[i]
        if self._generation != generation:
            raise InvalidatedViewError("Sequence was structurally modified during iteration.")

    def __contains__(self, value: Any) -> bool:
        return self._find(value, 0, self._length) is not None

    def index(self, value: Any, start: int = 0, stop: Optional[int] = None) -> int:
        """
        Index of the first element equal to `value` in [start, stop).

        Raises:
            ValueError: If the value is not present.
        """
        # negative bounds count from the end, as in list.index
        start, stop, _ = slice(start, stop).indices(self._length)
        found = self._find(value, start, stop)
        if found is None:
            raise ValueError(f"{value!r} is not in the sequence")
        return found

    def count(self, value: Any) -> int:
        buffer = self._buffer
        return sum(1 for i in range(self._length) if bool(buffer[i] == value))

    def _find(self, value: Any, start: int, stop: int) -> Optional[int]:
        buffer = self._buffer
        for i in range(start, stop):
            if bool(buffer[i] == value):
                return i
        return None

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DynamicSequence):
            if self._length != other._length:
                return False
            if self._dtype.kind != "O" and other._dtype.kind != "O":
                return bool(np.array_equal(self._live(), other._live()))
            return self.to_list() == other.to_list()
        if isinstance(other, (list, tuple)):
            return self.to_list() == list(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def to_numpy(self, copy: bool = True) -> npt.NDArray:
        """
        The live elements as a numpy array.

        With copy=False a read-only view of the current block is returned;
        it shares the block's lifetime and goes stale on reallocation.
        """
        live = self._live()
        if copy:
            return live.copy()
        view = live.view()
        view.flags.writeable = False
        return view

    def to_list(self) -> list[Any]:
        return self._live().tolist()

    def copy(self) -> DynamicSequence:
        """Independent sequence with the same elements, dtype and settings."""
        return self._spawn(self._live())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _spawn(self, values: npt.NDArray) -> DynamicSequence:
        clone = DynamicSequence(
            self._dtype,
            capacity=values.shape[0],
            element_type=self._element_type,
            growth=self._growth,
            allocator=self._allocator,
            debug=self._debug,
        )
        clone.extend(values)
        return clone

    def _live(self) -> npt.NDArray:
        """View of slots [0, len) of the current block."""
        return self._buffer[:self._length]

    def _touch(self, shifted: int = 0) -> None:
        """Record a structural mutation."""
        self._generation += 1
        self._stats.elements_shifted += shifted
        self._check_invariants()

    def _release_slots(self, start: int, stop: int) -> None:
        # numeric slots just stop being logically present
        if self._dtype.kind == "O":
            buffer = self._buffer
            for i in range(start, stop):
                buffer[i] = None

    def _fill(self, start: int, stop: int, value: Any) -> None:
        buffer = self._buffer
        if self._dtype.kind == "O":
            # slice assignment would try to broadcast tuples and lists
            for i in range(start, stop):
                buffer[i] = value
        else:
            buffer[start:stop] = value

    def _check_index(self, index: int, operation: str) -> int:
        index = operator.index(index)
        if not 0 <= index < self._length:
            raise OutOfRangeError(index, self._length, operation)
        return index

    def _check_position(self, index: int, operation: str) -> int:
        index = operator.index(index)
        if not 0 <= index <= self._length:
            raise OutOfRangeError(index, self._length, operation)
        return index

    def _check_invariants(self) -> None:
        if not self._debug:
            return
        buffer = self._buffer
        if buffer.ndim != 1 or not buffer.flags.c_contiguous:
            raise InvariantViolation("Storage block is not a flat contiguous array.")
        if buffer.dtype != self._dtype:
            raise InvariantViolation(f"Storage dtype {buffer.dtype} differs from element dtype {self._dtype}.")
        if not 0 <= self._length <= buffer.shape[0]:
            raise InvariantViolation(f"Length {self._length} exceeds capacity {buffer.shape[0]}.")

    def _check_element_type(self, value: Any) -> None:
        if self._element_type is not None and not isinstance(value, self._element_type):
            raise ElementTypeError(f"Expected {self._element_type.__name__}, got {type(value).__name__}.")

    def _check_castable(self, values: npt.NDArray) -> None:
        source, target = values.dtype.kind, self._dtype.kind
        # int64 -> uintN is not same_kind in numpy; integers are range-checked instead
        integral = source in "biu" and target in "iu"
        if not integral and not np.can_cast(values.dtype, self._dtype, casting="same_kind"):
            raise ElementTypeError(f"Cannot store {values.dtype} values in a {self._dtype} sequence.")
        if target in "iu" and source in "iu" and values.size:
            info = np.iinfo(self._dtype)
            low, high = int(values.min()), int(values.max())
            if low < info.min or high > info.max:
                raise ElementTypeError(f"Values in [{low}, {high}] do not fit {self._dtype} "
                                       f"range [{info.min}, {info.max}].")

    def _coerce(self, value: Any) -> Any:
        """Validate one value and convert it to the element dtype."""
        if self._dtype.kind == "O":
            self._check_element_type(value)
            return value

        if self._dtype.kind in "fc" and _is_python_int(value):
            value = self._widen_int(value)
        try:
            array = np.asarray(value)
        except (OverflowError, ValueError) as e:
            raise ElementTypeError(f"Cannot store {value!r} in a {self._dtype} sequence: {e}") from e
        if array.ndim != 0:
            raise ElementTypeError(f"Expected a scalar, got a value of shape {array.shape}.")
        self._check_castable(array)
        return array.astype(self._dtype)[()]

    def _coerce_many(self, values: Iterable[Any]) -> npt.NDArray:
        """Validate a batch and return it as a fresh 1-D array of the element dtype."""
        if isinstance(values, DynamicSequence):
            values = values._live()

        if self._dtype.kind == "O":
            items = values.tolist() if isinstance(values, np.ndarray) else list(values)
            block = np.empty(len(items), dtype=object)
            for i, item in enumerate(items):
                self._check_element_type(item)
                block[i] = item
            return block

        if isinstance(values, np.ndarray) and values.dtype.kind != "O":
            array = values
        else:
            items = values.tolist() if isinstance(values, np.ndarray) else list(values)
            if not items:
                return np.empty(0, dtype=self._dtype)
            try:
                array = np.asarray(items)
                if array.dtype.kind == "O" and self._dtype.kind in "fc":
                    # ints beyond 64 bits end up in an object array
                    array = np.asarray([self._widen_int(v) if _is_python_int(v) else v for v in items])
            except (OverflowError, ValueError) as e:
                raise ElementTypeError(f"Cannot store these values in a {self._dtype} sequence: {e}") from e

        if array.ndim != 1:
            raise ElementTypeError(f"Expected a flat sequence of scalars, got shape {array.shape}.")
        if array.size == 0:
            return np.empty(0, dtype=self._dtype)
        self._check_castable(array)
        # astype always returns a new array, so inserting a sequence into itself is safe
        return array.astype(self._dtype)

    def _widen_int(self, value: int) -> float | complex:
        convert = complex if self._dtype.kind == "c" else float
        try:
            return convert(value)
        except OverflowError as e:
            raise ElementTypeError(f"Integer {value} is too large for a {self._dtype} sequence.") from e


def _is_python_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _infer_dtype(items: list[Any]) -> np.dtype:
    if not items:
        return np.dtype(np.float64)
    try:
        probe = np.asarray(items)
    except (OverflowError, ValueError):
        return np.dtype(object)
    if probe.ndim != 1 or probe.dtype.kind not in SUPPORTED_KINDS:
        return np.dtype(object)
    return probe.dtype
