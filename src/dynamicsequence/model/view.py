"""
Element Views
=============
A view is a weak, positional reference into a sequence. It remembers the
generation of the sequence at the moment it was issued; any structural
mutation (append, insert, remove, reallocation, ...) moves the sequence to a
new generation and the view goes stale.

Debug sequences raise InvalidatedViewError when a stale view is used.
Release sequences skip the check, and using a stale view there is the
caller's error.
"""
from __future__ import annotations

from typing import Any, TYPE_CHECKING

from dynamicsequence.errors import InvalidatedViewError

if TYPE_CHECKING:
    from dynamicsequence.model.sequence import DynamicSequence


class ElementView:
    """
    Reference to the element at a fixed index of a DynamicSequence.
    """
    __slots__ = ("_sequence", "_index", "_generation")

    def __init__(self, sequence: DynamicSequence, index: int) -> None:
        """
        Initialize the view. Callers normally use DynamicSequence.view().

        Args:
            sequence: The sequence the view points into.
            index: Position of the element, already bounds-checked.
        """
        self._sequence = sequence
        self._index = index
        self._generation = sequence.generation

    def __repr__(self) -> str:
        state = "valid" if self.is_valid else "stale"
        return f"{self.__class__.__name__}(index={self._index}, generation={self._generation}, {state})"

    @property
    def index(self) -> int:
        return self._index

    @property
    def generation(self) -> int:
        """Generation of the sequence when this view was issued."""
        return self._generation

    @property
    def is_valid(self) -> bool:
        """True while no structural mutation happened since the view was issued."""
        return self._generation == self._sequence.generation

    def _ensure_valid(self) -> None:
        if self._sequence.debug and not self.is_valid:
            raise InvalidatedViewError(
                f"View of index {self._index} was issued at generation {self._generation}, "
                f"sequence is now at generation {self._sequence.generation}."
            )

    def get(self) -> Any:
        """Read the referenced element."""
        self._ensure_valid()
        return self._sequence.get_unchecked(self._index)

    def set(self, value: Any) -> None:
        """Overwrite the referenced element in place."""
        self._ensure_valid()
        self._sequence.set_at(self._index, value)

    @property
    def address(self) -> int:
        """Memory address of the referenced slot."""
        self._ensure_valid()
        return self._sequence.base_address + self._index * self._sequence.itemsize
