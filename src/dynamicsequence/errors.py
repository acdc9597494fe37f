"""
Error Taxonomy
==============
Every failure the container can report has its own class so calling code can
branch on the cause (retry with a smaller request vs. fix the caller).

Each class also derives from the closest built-in exception, so code written
against plain Python containers (``except IndexError``) keeps working.
"""


class DynamicSequenceError(Exception):
    """Base class for all errors raised by this package."""


class OutOfRangeError(DynamicSequenceError, IndexError):
    """Raised when an index lies outside the valid bounds of the sequence."""

    def __init__(self, index: int, length: int, operation: str = "access") -> None:
        self.index = index
        self.length = length
        self.operation = operation
        super().__init__(f"{operation}: index {index} out of range for length {length}")


class EmptySequenceError(OutOfRangeError):
    """Raised by front/back/pop and scans when the sequence holds no elements."""

    def __init__(self, operation: str = "access") -> None:
        self.index = 0
        self.length = 0
        self.operation = operation
        IndexError.__init__(self, f"{operation}: sequence is empty")


class AllocationError(DynamicSequenceError, MemoryError):
    """Raised when the allocator cannot provide a block of the requested size."""

    def __init__(self, capacity: int, nbytes: int, reason: str = "") -> None:
        self.capacity = capacity
        self.nbytes = nbytes
        message = f"Cannot allocate {capacity} elements ({nbytes} bytes)"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidatedViewError(DynamicSequenceError, RuntimeError):
    """Raised when a view or iterator is used after a structural mutation."""


class PreconditionError(DynamicSequenceError, ValueError):
    """Raised when a documented caller precondition is detected as violated."""


class ElementTypeError(DynamicSequenceError, TypeError):
    """Raised when a value cannot be stored as the sequence's element type."""


class InvariantViolation(DynamicSequenceError, AssertionError):
    """Raised by debug builds when an internal storage invariant does not hold."""
