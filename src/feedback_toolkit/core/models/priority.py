"""
Module: priority

Purpose:
    Maps priority weights (1-5) onto named tiers and builds per-tier
    count distributions for result reporting.

Key Functions:
    - tier_for_weight(): Tier name for a weight
    - priority_distribution(): Count questions per tier (all tiers present)
"""

from __future__ import annotations

from typing import Dict, Iterable

# Highest tier first
PRIORITY_TIERS: Dict[int, str] = {
    5: "critical",
    4: "high",
    3: "medium",
    2: "low",
    1: "optional",
}


def tier_for_weight(weight: int) -> str:
    """Return the tier name for a priority weight."""
    try:
        return PRIORITY_TIERS[weight]
    except KeyError:
        raise ValueError(f"priority weight must be 1-5: {weight}") from None


def empty_distribution() -> Dict[str, int]:
    return {name: 0 for name in PRIORITY_TIERS.values()}


def priority_distribution(weights: Iterable[int]) -> Dict[str, int]:
    """
    Count weights per tier.

    Every tier key is present, so callers can index without checking.

    Example:
        >>> priority_distribution([5, 5, 3])["critical"]
        2
    """
    dist = empty_distribution()
    for weight in weights:
        dist[tier_for_weight(weight)] += 1
    return dist
