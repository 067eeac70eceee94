"""
Module: engine.batching

Purpose:
    Bounded fan-out of independent work items. Items are submitted in
    fixed-size batches to a worker pool; each batch is joined before the
    next one starts. A failing item is recorded, never allowed to abort
    its batch.

Key Functions:
    - run_in_batches(): Apply a function to items with bounded concurrency

Key Classes:
    - BatchItemResult: Outcome for one item
    - BatchReport: Outcomes for all items, in input order

Dependencies:
    - concurrent.futures (std)

Used By:
    - engine.controller: evaluate_many()
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class BatchItemResult(Generic[T, R]):
    """Result or error for one item."""

    index: int
    item: T
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchReport(Generic[T, R]):
    """All item outcomes, in input order."""

    results: Tuple[BatchItemResult[T, R], ...]

    @property
    def succeeded(self) -> List[BatchItemResult[T, R]]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> List[BatchItemResult[T, R]]:
        return [r for r in self.results if not r.ok]

    @property
    def values(self) -> List[R]:
        """Values of successful items."""
        return [r.value for r in self.results if r.ok]

    def __len__(self) -> int:
        return len(self.results)


def _run_one(index: int, item: Any, fn: Callable[[Any], Any]) -> BatchItemResult:
    try:
        return BatchItemResult(index, item, value=fn(item))
    except Exception as e:
        logger.warning(f"Batch item {index} failed: {e}")
        return BatchItemResult(index, item, error=e)


def run_in_batches(
    items: Sequence[T],
    fn: Callable[[T], R],
    batch_size: int = 10,
    max_workers: Optional[int] = None,
) -> BatchReport[T, R]:
    """
    Apply ``fn`` to every item, ``batch_size`` at a time.

    Args:
        items: Work items
        fn: Function applied to each item
        batch_size: Items in flight at once
        max_workers: Pool size (defaults to batch_size)

    Returns:
        BatchReport with one entry per item, in input order

    Example:
        >>> report = run_in_batches([1, 2, 0], lambda x: 10 // x, batch_size=2)
        >>> report.values
        [10, 5]
        >>> len(report.failed)
        1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1: {batch_size}")

    items = list(items)
    results: List[BatchItemResult] = []
    if not items:
        return BatchReport(())

    workers = min(max_workers or batch_size, batch_size)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        for start in range(0, len(items), batch_size):
            batch = items[start:start + batch_size]
            futures = [
                pool.submit(_run_one, start + offset, item, fn)
                for offset, item in enumerate(batch)
            ]
            # Join the whole batch before submitting the next one
            results.extend(f.result() for f in futures)
            logger.debug(f"Batch {start // batch_size + 1}: {len(batch)} items done")

    report = BatchReport(tuple(results))
    if report.failed:
        logger.warning(f"{len(report.failed)}/{len(report)} batch items failed")
    return report
