"""
Folding a sequence into one value.

`reduce` is the authoritative form: a strict left-to-right fold whose result
is fully determined by the inputs, whatever the algebra of `op`.

`parallel_reduce` is the orchestration layer for large sequences. It splits
the elements into contiguous chunks, folds the chunks on a thread pool and
then folds `initial` with the chunk results. That regrouping only preserves
the result when `op` is associative and commutative, so the caller has to
opt in explicitly. The container is only read during the evaluation.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from typing import Any, Callable, Optional, TYPE_CHECKING

import numpy as np

from dynamicsequence import config
from dynamicsequence.errors import InvalidatedViewError, PreconditionError
from dynamicsequence.utils import chunk_bounds

if TYPE_CHECKING:
    import numpy.typing as npt

    from dynamicsequence.model.sequence import DynamicSequence

logger = logging.getLogger(__name__)

BinaryOp = Callable[[Any, Any], Any]


def reduce(sequence: DynamicSequence, initial: Any, op: BinaryOp) -> Any:
    """
    Fold left to right: op(...op(op(initial, s[0]), s[1])..., s[n-1]).

    **Example**:

        reduce(DynamicSequence.from_iterable([5, 23, 2, 17]), 0, operator.sub)
        # Output: -47
    """
    result = initial
    for item in sequence:
        result = op(result, item)
    return result


def _fold_chunk(values: npt.NDArray, start: int, stop: int, op: BinaryOp) -> Any:
    if isinstance(op, np.ufunc):
        return op.reduce(values[start:stop])
    acc = values[start]
    for i in range(start + 1, stop):
        acc = op(acc, values[i])
    return acc


def parallel_reduce(
    sequence: DynamicSequence,
    initial: Any,
    op: BinaryOp,
    *,
    associative: bool = False,
    workers: Optional[int] = None,
    threshold: Optional[int] = None,
) -> Any:
    """
    Chunked fold evaluated on a thread pool.

    Args:
        sequence: Sequence to fold. Must not be mutated during the call.
        initial: Starting value, combined with the chunk results at the end.
        op: Binary operation. Must be associative and commutative for the
            result to equal `reduce`.
        associative: Caller's confirmation that `op` is associative and commutative.
        workers: Number of chunks/threads (defaults to config.DEFAULT_REDUCE_WORKERS).
        threshold: Sequences shorter than this use the sequential fold
            (defaults to config.PARALLEL_REDUCE_THRESHOLD).

    Raises:
        PreconditionError: If `associative` was not confirmed.
        InvalidatedViewError: If the sequence was structurally modified while folding.

    Returns:
        The folded value. With a non-commutative `op` it may differ from
        `reduce`; for a given length and worker count the chunking, and so
        the result, is deterministic.
    """
    if not associative:
        raise PreconditionError("parallel_reduce needs an associative and commutative operation; "
                                "pass associative=True to confirm, or use reduce().")
    workers = config.DEFAULT_REDUCE_WORKERS if workers is None else workers
    threshold = config.PARALLEL_REDUCE_THRESHOLD if threshold is None else threshold
    if workers < 1:
        raise ValueError(f"Worker count must be at least 1, got {workers}.")

    n = len(sequence)
    if workers == 1 or n < max(threshold, 2):
        return reduce(sequence, initial, op)

    generation = sequence.generation
    live = sequence._live()
    bounds = chunk_bounds(n, workers)
    logger.debug(f"Parallel reduce of {n} elements in {len(bounds)} chunks")

    with ThreadPoolExecutor(max_workers=len(bounds)) as pool:
        futures = [pool.submit(_fold_chunk, live, start, stop, op) for start, stop in bounds]
        partials = [future.result() for future in futures]

    if sequence.generation != generation:
        raise InvalidatedViewError("Sequence was structurally modified during parallel_reduce.")

    result = initial
    for partial in partials:
        result = op(result, partial)
    return result
