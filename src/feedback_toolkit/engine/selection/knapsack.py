"""
Module: engine.selection.knapsack

Purpose:
    Exact 0/1 knapsack over integer weights, used by the
    dynamic_programming strategy.

Key Functions:
    - solve_knapsack(): Indices of a value-maximising subset

Algorithm:
    The table is filled from the last item backwards so that
    ``table[i][c]`` is the best value achievable from items ``i..n-1``
    with capacity ``c``. Reconstruction then walks forwards and includes
    item ``i`` whenever doing so still reaches the optimum. Among all
    optimal subsets this picks the one that prefers earlier items, which
    matches the greedy strategy's tie-break when items arrive in greedy
    order.

Dependencies:
    - numpy: Row-wise vectorised table updates
"""

from __future__ import annotations

import logging
from typing import List, Sequence

import numpy as np

logger = logging.getLogger(__name__)


def knapsack_cells(item_count: int, capacity: int) -> int:
    """Number of table cells a solve would allocate."""
    return (item_count + 1) * (capacity + 1)


def solve_knapsack(
    weights: Sequence[int],
    values: Sequence[int],
    capacity: int,
) -> List[int]:
    """
    Choose items maximising total value within ``capacity``.

    Args:
        weights: Non-negative integer weight per item
        values: Non-negative integer value per item
        capacity: Non-negative integer capacity

    Returns:
        Ascending indices of the chosen items. Ties between optimal
        subsets resolve in favour of including lower indices.

    Raises:
        ValueError: On mismatched lengths or negative inputs

    Example:
        >>> solve_knapsack([20, 15, 10], [5, 4, 3], 30)
        [0, 2]
    """
    if len(weights) != len(values):
        raise ValueError(f"weights/values length mismatch: {len(weights)} != {len(values)}")
    if capacity < 0:
        raise ValueError(f"capacity must be >= 0: {capacity}")
    if any(w < 0 for w in weights) or any(v < 0 for v in values):
        raise ValueError("weights and values must be non-negative")

    n = len(weights)
    if n == 0:
        return []

    table = np.zeros((n + 1, capacity + 1), dtype=np.int64)

    for i in range(n - 1, -1, -1):
        below = table[i + 1]
        row = below.copy()
        w = int(weights[i])
        if w <= capacity:
            with_item = below[: capacity + 1 - w] + int(values[i])
            row[w:] = np.maximum(row[w:], with_item)
        table[i] = row

    chosen: List[int] = []
    remaining = capacity
    for i in range(n):
        w = int(weights[i])
        if w <= remaining and table[i + 1][remaining - w] + int(values[i]) == table[i][remaining]:
            chosen.append(i)
            remaining -= w

    logger.debug(
        f"Knapsack: {n} items, capacity {capacity}, "
        f"chose {len(chosen)} worth {int(table[0][capacity])}"
    )
    return chosen
