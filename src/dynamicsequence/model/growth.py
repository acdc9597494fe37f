"""
Capacity Growth Policy
======================
Decides how large the next storage block should be.

Classes:
    GrowthPolicy: Geometric growth parameters and the capacity calculation.
    StorageStats: Counters describing how much copying the storage has done.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
import math
from typing import Dict

from dynamicsequence import config


@dataclass(frozen=True)
class GrowthPolicy:
    """
    Geometric growth: every reallocation multiplies capacity by `factor`.

    Any factor > 1 keeps the total relocation work of N appends O(N):
    with factor f, the copies sum to at most N / (f - 1) plus the initial block.
    """
    factor: float = config.DEFAULT_GROWTH_FACTOR
    initial_capacity: int = config.DEFAULT_INITIAL_CAPACITY

    def __post_init__(self) -> None:
        if not self.factor > 1.0:
            raise ValueError(f"Growth factor must be greater than 1, got {self.factor}.")
        if self.initial_capacity < 1:
            raise ValueError(f"Initial capacity must be at least 1, got {self.initial_capacity}.")

    def next_capacity(self, current: int, required: int) -> int:
        """
        Smallest capacity of the geometric series that holds `required` elements.

        Args:
            current: Capacity of the existing block (0 for a fresh sequence).
            required: Number of slots the caller needs.

        Returns:
            The new capacity, always >= required. Equal to `current` when it
            already suffices.
        """
        if required <= current:
            return current

        capacity = max(current, self.initial_capacity)
        while capacity < required:
            # at least one slot per step, small capacities times a small factor can round down
            capacity = max(capacity + 1, math.ceil(capacity * self.factor))
        return capacity


@dataclass
class StorageStats:
    """Copy counters for one sequence. Never reset implicitly."""
    reallocations: int = 0
    elements_relocated: int = 0  # copied into a new block
    elements_shifted: int = 0  # moved inside the same block (insert/remove/rotate)

    @property
    def total_moves(self) -> int:
        return self.elements_relocated + self.elements_shifted

    def reset(self) -> None:
        self.reallocations = 0
        self.elements_relocated = 0
        self.elements_shifted = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)
