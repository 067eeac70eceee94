"""
Module: engine.selection.strategies

Purpose:
    The interchangeable selection strategies and their registry. Every
    strategy receives candidates that already passed the priority
    threshold and returns the questions to ask, in asking order.

Key Classes:
    - SelectionStrategy: Common interface
    - GreedyPriorityStrategy: Highest priority first, skipping misfits
    - DynamicProgrammingStrategy: Exact knapsack with a capacity guard
    - TimeBalancedStrategy: Budget split across priority tiers
    - TokenEstimationStrategy: Greedy on token-derived durations
    - StrategyOutcome: What a strategy returns

Key Functions:
    - get_strategy(): Look up a strategy by SelectionAlgorithm

Dependencies:
    - engine.duration: Duration estimates
    - engine.selection.knapsack: Exact solver
    - common.thresholds: Knapsack guard limits

Used By:
    - engine.selection.selector
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from feedback_toolkit.common.thresholds import SELECTION_THRESHOLDS, SelectionThresholds
from feedback_toolkit.core.models.evaluation import SelectedQuestion
from feedback_toolkit.core.models.priority import tier_for_weight
from feedback_toolkit.core.models.questions import Question
from feedback_toolkit.engine.duration import (
    DurationEstimate,
    DurationSource,
    duration_estimate,
    estimate_from_tokens,
)

from .algorithm import SelectionAlgorithm
from .knapsack import knapsack_cells, solve_knapsack

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyOutcome:
    """
    Selection produced by a strategy.

    ``algorithm`` is the strategy that actually produced ``selections``;
    it differs from the requested one only after a fallback, in which
    case ``fallback_reason`` says why.
    """

    selections: Tuple[SelectedQuestion, ...]
    algorithm: SelectionAlgorithm
    fallback_reason: Optional[str] = None

    @property
    def total_priority(self) -> int:
        return sum(s.question.priority_weight for s in self.selections)


def priority_order(candidates: Sequence[Question]) -> List[Question]:
    """Stable sort by priority descending; ties keep input order."""
    return sorted(candidates, key=lambda q: -q.priority_weight)


def _greedy_fill(
    ordered: Sequence[Question],
    budget: float,
    estimate_of: Callable[[Question], DurationEstimate],
    reason_of: Callable[[Question, float], str],
    used: float = 0.0,
) -> Tuple[List[SelectedQuestion], float]:
    """
    Take each question in order if it still fits.

    Scanning continues past a question that does not fit, so a shorter
    lower-priority question can still use the remaining time.
    """
    picks: List[SelectedQuestion] = []
    for question in ordered:
        estimate = estimate_of(question)
        duration = estimate.seconds
        if used + duration <= budget:
            picks.append(SelectedQuestion(
                question, duration, reason_of(question, duration), estimate.confidence
            ))
            used += duration
    return picks, used


# ─────────────────────────────────────────────────────────────────────────────
# Strategy Interface
# ─────────────────────────────────────────────────────────────────────────────

class SelectionStrategy(ABC):
    """Common interface for selection strategies."""

    algorithm: SelectionAlgorithm

    def estimate_of(self, question: Question) -> DurationEstimate:
        """Duration charged against the budget for ``question``, with its source."""
        return duration_estimate(question)

    @abstractmethod
    def select(self, candidates: Sequence[Question], budget: float) -> StrategyOutcome:
        """
        Choose questions within ``budget`` seconds.

        Args:
            candidates: Questions at or above the priority threshold
            budget: Time budget in seconds

        Returns:
            StrategyOutcome whose durations sum to at most ``budget``
        """


class GreedyPriorityStrategy(SelectionStrategy):
    """Highest priority first; O(n log n)."""

    algorithm = SelectionAlgorithm.GREEDY_PRIORITY

    def _reason(self, question: Question, duration: float) -> str:
        return (
            f"Priority {question.priority_weight} ({tier_for_weight(question.priority_weight)}), "
            f"{duration:.1f}s fits remaining time"
        )

    def select(self, candidates: Sequence[Question], budget: float) -> StrategyOutcome:
        picks, used = _greedy_fill(
            priority_order(candidates), budget, self.estimate_of, self._reason
        )
        logger.debug(f"Greedy: {len(picks)}/{len(candidates)} questions, {used:.1f}/{budget:.1f}s")
        return StrategyOutcome(tuple(picks), self.algorithm)


class TokenEstimationStrategy(GreedyPriorityStrategy):
    """Greedy selection where every duration is derived from token counts."""

    algorithm = SelectionAlgorithm.TOKEN_ESTIMATION

    def estimate_of(self, question: Question) -> DurationEstimate:
        return DurationEstimate(estimate_from_tokens(question), DurationSource.TOKENS)

    def _reason(self, question: Question, duration: float) -> str:
        tokens = question.estimated_tokens or 0
        return (
            f"Priority {question.priority_weight}, "
            f"{duration:.1f}s estimated from {tokens} tokens"
        )


class DynamicProgrammingStrategy(SelectionStrategy):
    """
    Exact 0/1 knapsack maximising total priority.

    Durations are rounded up to whole seconds and the budget is rounded
    down, so the real durations of the chosen set always fit. When the
    table would exceed the configured limits the strategy falls back to
    greedy and records why.
    """

    algorithm = SelectionAlgorithm.DYNAMIC_PROGRAMMING

    def __init__(self, thresholds: SelectionThresholds = SELECTION_THRESHOLDS):
        self.thresholds = thresholds
        self._greedy = GreedyPriorityStrategy()

    def _guard(self, item_count: int, capacity: int) -> Optional[str]:
        """Return a fallback reason when the table would be too large."""
        if capacity > self.thresholds.max_dp_capacity_seconds:
            return (
                f"capacity {capacity}s exceeds knapsack limit "
                f"{self.thresholds.max_dp_capacity_seconds}s"
            )
        cells = knapsack_cells(item_count, capacity)
        if cells > self.thresholds.max_dp_cells:
            return f"table of {cells} cells exceeds knapsack limit {self.thresholds.max_dp_cells}"
        return None

    def select(self, candidates: Sequence[Question], budget: float) -> StrategyOutcome:
        ordered = priority_order(candidates)
        capacity = max(0, math.floor(budget))

        fallback_reason = self._guard(len(ordered), capacity)
        if fallback_reason:
            logger.warning(f"Knapsack capacity guard triggered ({fallback_reason}); using greedy")
            greedy = self._greedy.select(candidates, budget)
            return StrategyOutcome(greedy.selections, greedy.algorithm, fallback_reason)

        estimates = [self.estimate_of(q) for q in ordered]
        weights = [math.ceil(e.seconds) for e in estimates]
        values = [q.priority_weight for q in ordered]

        chosen = solve_knapsack(weights, values, capacity)
        picks = tuple(
            SelectedQuestion(
                ordered[i],
                estimates[i].seconds,
                f"Priority {ordered[i].priority_weight} in highest-value combination "
                f"within {capacity}s",
                estimates[i].confidence,
            )
            for i in chosen
        )
        outcome = StrategyOutcome(picks, self.algorithm)

        # Whole-second rounding can lose to greedy on real durations, or tie it
        # with a different set; greedy's picks win both cases
        greedy = self._greedy.select(candidates, budget)
        if greedy.total_priority >= outcome.total_priority:
            logger.debug(
                f"Knapsack total {outcome.total_priority} does not beat greedy "
                f"{greedy.total_priority}; keeping greedy picks"
            )
            return StrategyOutcome(greedy.selections, self.algorithm)

        logger.debug(
            f"Knapsack: {len(picks)}/{len(candidates)} questions, "
            f"total priority {outcome.total_priority}"
        )
        return outcome


class TimeBalancedStrategy(SelectionStrategy):
    """
    Give each priority tier a share of the budget.

    A tier's share is proportional to ``priority * count`` among the
    candidates. Each tier is filled greedily within its share, highest
    tier first, then a final greedy pass spends whatever is left.
    """

    algorithm = SelectionAlgorithm.TIME_BALANCED

    def allocations(self, candidates: Sequence[Question], budget: float) -> Dict[int, float]:
        """Seconds allotted to each priority present, highest first."""
        counts: Dict[int, int] = {}
        for q in candidates:
            counts[q.priority_weight] = counts.get(q.priority_weight, 0) + 1
        total_weight = sum(p * c for p, c in counts.items())
        if total_weight == 0:
            return {}
        return {
            p: budget * (p * counts[p]) / total_weight
            for p in sorted(counts, reverse=True)
        }

    def select(self, candidates: Sequence[Question], budget: float) -> StrategyOutcome:
        picks: List[SelectedQuestion] = []
        picked_ids = set()
        used = 0.0

        for priority, allotment in self.allocations(candidates, budget).items():
            tier = tier_for_weight(priority)
            tier_used = 0.0
            for question in candidates:
                if question.priority_weight != priority:
                    continue
                estimate = self.estimate_of(question)
                duration = estimate.seconds
                if tier_used + duration <= allotment and used + duration <= budget:
                    picks.append(SelectedQuestion(
                        question,
                        duration,
                        f"Within {tier} tier allocation of {allotment:.1f}s",
                        estimate.confidence,
                    ))
                    picked_ids.add(question.id)
                    tier_used += duration
                    used += duration
            logger.debug(f"Time-balanced: {tier} used {tier_used:.1f}/{allotment:.1f}s")

        leftovers = [q for q in priority_order(candidates) if q.id not in picked_ids]
        extra, used = _greedy_fill(
            leftovers,
            budget,
            self.estimate_of,
            lambda q, d: f"Priority {q.priority_weight} fills unused tier time",
            used=used,
        )
        picks.extend(extra)

        logger.debug(
            f"Time-balanced: {len(picks)}/{len(candidates)} questions "
            f"({len(extra)} from leftover pass), {used:.1f}/{budget:.1f}s"
        )
        return StrategyOutcome(tuple(picks), self.algorithm)


# ─────────────────────────────────────────────────────────────────────────────
# Registry
# ─────────────────────────────────────────────────────────────────────────────

STRATEGY_REGISTRY: Dict[SelectionAlgorithm, Callable[[], SelectionStrategy]] = {
    SelectionAlgorithm.GREEDY_PRIORITY: GreedyPriorityStrategy,
    SelectionAlgorithm.DYNAMIC_PROGRAMMING: DynamicProgrammingStrategy,
    SelectionAlgorithm.TIME_BALANCED: TimeBalancedStrategy,
    SelectionAlgorithm.TOKEN_ESTIMATION: TokenEstimationStrategy,
}


def get_strategy(algorithm: SelectionAlgorithm) -> SelectionStrategy:
    """Instantiate the strategy registered for ``algorithm``."""
    return STRATEGY_REGISTRY[SelectionAlgorithm.from_name(algorithm)]()
