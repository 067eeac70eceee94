"""
Module: evaluation

Purpose:
    Result types for question selection. An EvaluationResult is the
    complete answer to "what should this call ask": the ordered
    selection, what was left out, and metadata about how the answer
    was produced.

Key Classes:
    - SelectedQuestion: One chosen question with its budgeted duration
    - EvaluationResult: Immutable selection outcome

Dependencies:
    - dataclasses (std)
    - functools (std)
    - .questions.Question
    - .priority

Used By:
    - engine.selection.selector
    - engine.controller
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from .priority import priority_distribution
from .questions import Question

if TYPE_CHECKING:
    from feedback_toolkit.engine.selection.algorithm import SelectionAlgorithm


@dataclass(frozen=True)
class SelectedQuestion:
    """
    A question chosen for the call.

    Attributes:
        question: The selected question
        estimated_duration: Seconds charged against the budget
        selection_reason: Human-readable reason it was picked
        confidence: Trust in estimated_duration, by where it came from
    """

    question: Question
    estimated_duration: float
    selection_reason: str = ""
    confidence: float = 1.0

    def __post_init__(self) -> None:
        if self.estimated_duration < 0:
            raise ValueError(f"estimated_duration must be >= 0: {self.estimated_duration}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1]: {self.confidence}")


@dataclass(frozen=True)
class EvaluationResult:
    """
    Outcome of one selection run (immutable).

    Attributes:
        selections: Chosen questions in asking order
        excluded_question_ids: Every candidate that was not selected
        max_duration_seconds: Budget the selection was made against
        algorithm: Strategy that produced the selection
        requested_algorithm: Strategy the caller asked for
        fallback_reason: Why the requested strategy was replaced, if it was
        questions_considered: Candidates left after the priority threshold
        processing_time_ms: Wall time of the evaluation (set by the service)
        performance_valid: False when the evaluation exceeded its time limit
        processing_stages: Stage name -> milliseconds
        trigger_logs: Opaque trigger metadata passed through unchanged
        warnings: Non-fatal notes about the run

    Invariants:
        - No question appears twice in selections
        - excluded_question_ids is disjoint from the selected ids
        - estimated_duration_seconds <= max_duration_seconds

    Example:
        >>> result.estimated_duration_seconds
        45.0
        >>> result.priority_distribution["critical"]
        1
    """

    selections: Tuple[SelectedQuestion, ...]
    excluded_question_ids: Tuple[str, ...]
    max_duration_seconds: float
    algorithm: "SelectionAlgorithm"
    requested_algorithm: Optional["SelectionAlgorithm"] = None
    fallback_reason: Optional[str] = None
    questions_considered: int = 0
    processing_time_ms: float = 0.0
    performance_valid: bool = True
    processing_stages: Dict[str, float] = field(default_factory=dict)
    trigger_logs: Tuple[Any, ...] = ()
    warnings: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate result on construction."""
        selected_ids = [s.question.id for s in self.selections]
        if len(selected_ids) != len(set(selected_ids)):
            raise ValueError("Duplicate questions in evaluation result")
        overlap = set(selected_ids) & set(self.excluded_question_ids)
        if overlap:
            raise ValueError(f"Questions both selected and excluded: {sorted(overlap)}")
        if self.requested_algorithm is None:
            object.__setattr__(self, "requested_algorithm", self.algorithm)

    # ─────────────────────────────────────────────────────────────────────────
    # Calculated Properties
    # ─────────────────────────────────────────────────────────────────────────

    @cached_property
    def selected_questions(self) -> Tuple[Question, ...]:
        return tuple(s.question for s in self.selections)

    @cached_property
    def estimated_duration_seconds(self) -> float:
        """Sum of the budgeted durations of the selection."""
        return float(sum(s.estimated_duration for s in self.selections))

    @cached_property
    def total_priority(self) -> int:
        return sum(s.question.priority_weight for s in self.selections)

    @cached_property
    def priority_distribution(self) -> Dict[str, int]:
        """Selected question count per tier; every tier key is present."""
        return priority_distribution(s.question.priority_weight for s in self.selections)

    @property
    def average_confidence(self) -> float:
        """Mean duration confidence of the selection (0 when empty)."""
        if not self.selections:
            return 0.0
        return sum(s.confidence for s in self.selections) / len(self.selections)

    @property
    def time_utilization(self) -> float:
        """Fraction of the budget used, in [0, 1]."""
        if self.max_duration_seconds <= 0:
            return 0.0
        return min(1.0, self.estimated_duration_seconds / self.max_duration_seconds)

    @property
    def capacity_guard_triggered(self) -> bool:
        """True when the requested strategy was replaced by the greedy fallback."""
        return self.fallback_reason is not None

    @property
    def question_count(self) -> int:
        return len(self.selections)

    # ─────────────────────────────────────────────────────────────────────────
    # Query Methods
    # ─────────────────────────────────────────────────────────────────────────

    def get_selection(self, question_id: str) -> SelectedQuestion | None:
        """Find a selection by question ID."""
        for selection in self.selections:
            if selection.question.id == question_id:
                return selection
        return None

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return (
            f"EvaluationResult(questions={self.question_count}, "
            f"duration={self.estimated_duration_seconds:.1f}/{self.max_duration_seconds:.0f}s, "
            f"algorithm={self.algorithm.value})"
        )
