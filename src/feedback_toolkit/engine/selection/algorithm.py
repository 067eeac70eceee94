"""
Selection algorithm identifiers.

Each value names one strategy in the selector registry. Callers pick a
strategy only through ``Constraints.algorithm``.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Sequence

from feedback_toolkit.common.thresholds import SELECTION_THRESHOLDS, SelectionThresholds
from feedback_toolkit.core.models.questions import Question
from feedback_toolkit.core.schemas.validator import ValidationError


class SelectionAlgorithm(Enum):
    """
    Strategy used to choose questions within the time budget.

    - GREEDY_PRIORITY: Highest priority first, skip what does not fit
    - DYNAMIC_PROGRAMMING: Exact 0/1 knapsack on priority vs. seconds
    - TIME_BALANCED: Budget split across priority tiers
    - TOKEN_ESTIMATION: Greedy, but durations always come from token counts
    """

    GREEDY_PRIORITY = "greedy_priority"
    DYNAMIC_PROGRAMMING = "dynamic_programming"
    TIME_BALANCED = "time_balanced"
    TOKEN_ESTIMATION = "token_estimation"

    @classmethod
    def from_name(cls, name: "str | SelectionAlgorithm") -> "SelectionAlgorithm":
        """Parse an algorithm name, raising ValidationError for unknown names."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(a.value for a in cls)
            raise ValidationError(
                f"Unknown selection algorithm {name!r} (expected one of: {valid})",
                field="algorithm",
            ) from None


_DESCRIPTIONS: Dict[SelectionAlgorithm, Dict[str, str]] = {
    SelectionAlgorithm.GREEDY_PRIORITY: {
        "description": "Selects the highest-priority questions that fit the time budget",
        "complexity": "O(n log n)",
        "best_for": "Fast selection where the top priorities matter most",
    },
    SelectionAlgorithm.DYNAMIC_PROGRAMMING: {
        "description": "Maximises total priority within the time budget (0/1 knapsack)",
        "complexity": "O(n * W)",
        "best_for": "Best total value when call time is tight",
    },
    SelectionAlgorithm.TIME_BALANCED: {
        "description": "Splits the budget across priority tiers before filling gaps",
        "complexity": "O(n log n)",
        "best_for": "Covering several priority levels in one call",
    },
    SelectionAlgorithm.TOKEN_ESTIMATION: {
        "description": "Greedy selection using token-derived speaking times",
        "complexity": "O(n log n)",
        "best_for": "Questions with no measured duration",
    },
}


def available_strategies() -> List[Dict[str, str]]:
    """
    Describe every registered strategy.

    Returns:
        One dict per strategy with ``name``, ``description``,
        ``complexity`` and ``best_for`` keys.
    """
    return [{"name": algo.value, **_DESCRIPTIONS[algo]} for algo in SelectionAlgorithm]


class AlgorithmPreference(Enum):
    """What a caller cares about most when no algorithm is specified."""

    SPEED = "speed"
    ACCURACY = "accuracy"
    BALANCED = "balanced"

    @classmethod
    def from_name(cls, name: "str | AlgorithmPreference") -> "AlgorithmPreference":
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ValidationError(
                f"Unknown algorithm preference {name!r} (expected one of: {valid})",
                field="preference",
            ) from None


def recommend_algorithm(
    candidates: Sequence[Question],
    preference: "str | AlgorithmPreference" = AlgorithmPreference.BALANCED,
    thresholds: SelectionThresholds = SELECTION_THRESHOLDS,
) -> SelectionAlgorithm:
    """
    Suggest a strategy for a candidate set.

    Small sets get the exact knapsack unless speed is preferred; large
    sets, or a speed preference, get greedy. In between, accuracy maps to
    time_balanced and balanced to token_estimation.

    Raises:
        ValidationError: If ``preference`` is not a known name
    """
    preference = AlgorithmPreference.from_name(preference)
    count = len(candidates)

    if count <= thresholds.small_candidate_count and preference != AlgorithmPreference.SPEED:
        return SelectionAlgorithm.DYNAMIC_PROGRAMMING
    if count > thresholds.large_candidate_count or preference == AlgorithmPreference.SPEED:
        return SelectionAlgorithm.GREEDY_PRIORITY
    if preference == AlgorithmPreference.ACCURACY:
        return SelectionAlgorithm.TIME_BALANCED
    return SelectionAlgorithm.TOKEN_ESTIMATION
