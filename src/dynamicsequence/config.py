"""
Configuration & Global Constants
================================
This module serves as the central registry for tunable defaults.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (growth factor, initial capacity,
   parallel threshold) from being scattered throughout the code.
2. Debug builds: It decides whether the extra runtime checks (stale views,
   unchecked access, invariants) are on by default, based on the
   DYNAMICSEQUENCE_DEBUG environment variable.

Exports:
    DEFAULT_GROWTH_FACTOR (float): Multiplier applied to capacity on growth.
    DEFAULT_INITIAL_CAPACITY (int): First capacity allocated for an empty sequence.
    PARALLEL_REDUCE_THRESHOLD (int): Minimum length before reduce goes parallel.
    DEFAULT_REDUCE_WORKERS (int): Worker count for parallel reduce.
    DEBUG_CHECKS (bool): Default debug mode for new sequences.
"""
import os


def env_flag(name: str, default: bool = False) -> bool:
    """
    Read a boolean flag from the environment.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    Unknown values fall back to `default`.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default

    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    return default


# Global Constants
# Doubling keeps total relocation work over N appends below 2N.
DEFAULT_GROWTH_FACTOR: float = 2.0
DEFAULT_INITIAL_CAPACITY: int = 4

# Below this length thread start-up costs more than the fold itself
PARALLEL_REDUCE_THRESHOLD: int = 10_000
DEFAULT_REDUCE_WORKERS: int = min(8, os.cpu_count() or 1)

DEBUG_CHECKS: bool = env_flag("DYNAMICSEQUENCE_DEBUG", default=False)
