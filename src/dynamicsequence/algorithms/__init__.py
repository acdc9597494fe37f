"""
Whole-sequence algorithms built on top of DynamicSequence.
"""
from dynamicsequence.algorithms.merge import merge, is_sorted
from dynamicsequence.algorithms.reduce import reduce, parallel_reduce
from dynamicsequence.algorithms.rotate import rotate, reverse
from dynamicsequence.algorithms.search import (
    find,
    find_if,
    max_element,
    max_index,
    min_element,
    min_index,
    minmax_indices,
)

__all__ = [
    "find",
    "find_if",
    "is_sorted",
    "max_element",
    "max_index",
    "merge",
    "min_element",
    "min_index",
    "minmax_indices",
    "parallel_reduce",
    "reduce",
    "reverse",
    "rotate",
]
