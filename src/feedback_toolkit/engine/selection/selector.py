"""
Module: engine.selection.selector

Purpose:
    Main question selection entry point. Chooses which candidate
    questions to ask so that delivered priority is as high as possible
    within the call's time budget.

Key Functions:
    - select_questions(): Main entry point for selection

Key Classes:
    - Selector: Orchestrates one selection run
    - SelectionError: Internal contract violation

Algorithm:
    1. Drop duplicate ids (first occurrence wins)
    2. Drop candidates below the priority threshold
    3. Run the strategy named by the constraints
    4. Check the budget invariant and build the EvaluationResult

Dependencies:
    - core.models: Question, EvaluationResult
    - engine.selection.strategies: Strategy registry
    - engine.selection.config: Constraints

Used By:
    - engine.controller: Evaluation service
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from feedback_toolkit.core.models.evaluation import EvaluationResult
from feedback_toolkit.core.models.questions import Question

from .config import Constraints
from .strategies import StrategyOutcome, get_strategy

logger = logging.getLogger(__name__)

# Float slack when re-checking the summed budget
_BUDGET_EPSILON = 1e-9


class SelectionError(Exception):
    """A strategy broke the selection contract."""
    pass


def select_questions(
    candidates: Sequence[Question],
    constraints: Constraints,
) -> EvaluationResult:
    """
    Select questions to ask within the time budget.

    Args:
        candidates: Eligible questions (may be empty)
        constraints: Budget, priority threshold and strategy

    Returns:
        EvaluationResult with the selection in asking order

    Raises:
        SelectionError: If the strategy violated the budget (not expected)

    Invariants:
        - Total selected duration <= constraints.max_duration_seconds
        - Every selected question has priority >= constraints.priority_threshold
        - Every candidate is either selected or excluded, never both

    Example:
        >>> result = select_questions(questions, Constraints(max_duration_seconds=50))
        >>> [q.id for q in result.selected_questions]
        ['1', '2', '3']
    """
    selector = Selector(list(candidates), constraints)
    return selector.run()


@dataclass
class Selector:
    """
    Question selection orchestrator.

    Attributes:
        candidates: Questions supplied by the caller
        constraints: Selection constraints
        warnings: Non-fatal notes collected during the run
    """

    candidates: List[Question]
    constraints: Constraints
    warnings: List[str] = field(default_factory=list)

    def run(self) -> EvaluationResult:
        """Execute selection and build the result."""
        unique = self._dedupe(self.candidates)
        eligible = self._filter_threshold(unique)

        if not eligible:
            logger.debug("No eligible questions; returning empty selection")
            outcome = StrategyOutcome((), self.constraints.algorithm)
        else:
            strategy = get_strategy(self.constraints.algorithm)
            outcome = strategy.select(eligible, self.constraints.max_duration_seconds)

        self._check_outcome(outcome)
        return self._build_result(unique, eligible, outcome)

    # ─────────────────────────────────────────────────────────────────────────
    # Steps
    # ─────────────────────────────────────────────────────────────────────────

    def _dedupe(self, questions: List[Question]) -> List[Question]:
        seen = set()
        unique = []
        for q in questions:
            if q.id in seen:
                self.warnings.append(f"Duplicate question id {q.id} ignored")
                continue
            seen.add(q.id)
            unique.append(q)
        if len(unique) != len(questions):
            logger.warning(f"Ignored {len(questions) - len(unique)} duplicate question ids")
        return unique

    def _filter_threshold(self, questions: List[Question]) -> List[Question]:
        threshold = self.constraints.priority_threshold
        eligible = [q for q in questions if q.priority_weight >= threshold]
        dropped = len(questions) - len(eligible)
        if dropped:
            logger.debug(f"Dropped {dropped} questions below priority {threshold}")
        return eligible

    def _check_outcome(self, outcome: StrategyOutcome) -> None:
        budget = self.constraints.max_duration_seconds
        threshold = self.constraints.priority_threshold
        total = sum(s.estimated_duration for s in outcome.selections)
        if total > budget + _BUDGET_EPSILON:
            raise SelectionError(
                f"{outcome.algorithm.value} selected {total:.3f}s, over budget {budget}s"
            )
        low = [s.question.id for s in outcome.selections if s.question.priority_weight < threshold]
        if low:
            raise SelectionError(f"Selected questions below priority threshold: {low}")
        if outcome.fallback_reason:
            self.warnings.append(
                f"{self.constraints.algorithm.value} fell back to "
                f"{outcome.algorithm.value}: {outcome.fallback_reason}"
            )

    def _build_result(
        self,
        unique: List[Question],
        eligible: List[Question],
        outcome: StrategyOutcome,
    ) -> EvaluationResult:
        selected_ids = {s.question.id for s in outcome.selections}
        excluded = tuple(q.id for q in unique if q.id not in selected_ids)

        result = EvaluationResult(
            selections=outcome.selections,
            excluded_question_ids=excluded,
            max_duration_seconds=float(self.constraints.max_duration_seconds),
            algorithm=outcome.algorithm,
            requested_algorithm=self.constraints.algorithm,
            fallback_reason=outcome.fallback_reason,
            questions_considered=len(eligible),
            warnings=tuple(self.warnings),
        )
        logger.debug(
            f"Selected {result.question_count}/{len(unique)} questions "
            f"({result.estimated_duration_seconds:.1f}/{result.max_duration_seconds:.0f}s) "
            f"via {result.algorithm.value}"
        )
        return result
