"""
Engine Package

Selection, grouping and the evaluation service built on them.

Exports:
    - QuestionEvaluationService: Boundary service with injected store/cache
    - evaluate_questions: One-shot evaluation
    - select_questions / group_questions / find_optimal_grouping: Engines
    - estimate_duration: Duration estimator
"""

from .batching import BatchItemResult, BatchReport, run_in_batches
from .cache import BoundedTTLCache
from .controller import (
    EvaluationError,
    EvaluationRequest,
    PerformanceCheck,
    QuestionEvaluationService,
    evaluate_questions,
)
from .duration import (
    DurationEstimate,
    DurationSource,
    duration_estimate,
    estimate_duration,
    estimate_from_tokens,
)
from .grouping import GroupingOptions, find_optimal_grouping, group_questions
from .selection import (
    Constraints,
    AlgorithmPreference,
    SelectionAlgorithm,
    SelectionError,
    available_strategies,
    recommend_algorithm,
    select_questions,
)
from .store import InMemoryQuestionStore, QuestionStore
from .timing import TimingLog, timed_phase

__all__ = [
    # service
    "QuestionEvaluationService",
    "EvaluationError",
    "EvaluationRequest",
    "PerformanceCheck",
    "evaluate_questions",
    # engines
    "select_questions",
    "group_questions",
    "find_optimal_grouping",
    "estimate_duration",
    "estimate_from_tokens",
    "duration_estimate",
    "DurationEstimate",
    "DurationSource",
    # config
    "Constraints",
    "GroupingOptions",
    "SelectionAlgorithm",
    "SelectionError",
    "available_strategies",
    "AlgorithmPreference",
    "recommend_algorithm",
    # infrastructure
    "BoundedTTLCache",
    "BatchItemResult",
    "BatchReport",
    "run_in_batches",
    "QuestionStore",
    "InMemoryQuestionStore",
    "TimingLog",
    "timed_phase",
]
