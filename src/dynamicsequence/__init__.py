"""
dynamicsequence
===============
A bounds-safe, resizable, contiguous sequence container on numpy storage.
"""
import logging

from dynamicsequence.errors import (
    AllocationError,
    DynamicSequenceError,
    ElementTypeError,
    EmptySequenceError,
    InvalidatedViewError,
    InvariantViolation,
    OutOfRangeError,
    PreconditionError,
)
from dynamicsequence.model.allocator import Allocator, BudgetAllocator, NumpyAllocator
from dynamicsequence.model.growth import GrowthPolicy, StorageStats
from dynamicsequence.model.sequence import DynamicSequence
from dynamicsequence.model.view import ElementView

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AllocationError",
    "Allocator",
    "BudgetAllocator",
    "DynamicSequence",
    "DynamicSequenceError",
    "ElementTypeError",
    "ElementView",
    "EmptySequenceError",
    "GrowthPolicy",
    "InvalidatedViewError",
    "InvariantViolation",
    "NumpyAllocator",
    "OutOfRangeError",
    "PreconditionError",
    "StorageStats",
]
