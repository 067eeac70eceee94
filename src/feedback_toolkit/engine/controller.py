"""
Module: engine.controller

Purpose:
    The evaluation service: the boundary callers use to run selection and
    grouping. It validates input, times each stage, flags results that
    exceed the latency limit, and optionally memoises grouping results in
    a caller-supplied cache.

Key Functions:
    - evaluate_questions(): One-shot evaluation with a default service

Key Classes:
    - QuestionEvaluationService: Selection + grouping with injected store,
      cache and logger
    - EvaluationRequest: One item for batch evaluation
    - PerformanceCheck: Outcome of the synthetic latency self-check
    - EvaluationError: Failure reading from the store

Dependencies:
    - engine.selection: select_questions, Constraints
    - engine.grouping: group_questions, find_optimal_grouping
    - engine.timing / engine.batching / engine.cache / engine.store

Used By:
    - feedback_toolkit.cli
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from feedback_toolkit.common.thresholds import PERFORMANCE_THRESHOLDS
from feedback_toolkit.core.models.evaluation import EvaluationResult
from feedback_toolkit.core.models.grouping import ExistingGroup, GroupingResult, OptimalGrouping
from feedback_toolkit.core.models.questions import Question
from feedback_toolkit.core.schemas.validator import ValidationError

from .batching import BatchReport, run_in_batches
from .cache import BoundedTTLCache
from .grouping import GroupingOptions, find_optimal_grouping, group_questions
from .selection import (
    AlgorithmPreference,
    Constraints,
    SelectionAlgorithm,
    available_strategies,
    recommend_algorithm,
    select_questions,
)
from .store import QuestionStore
from .timing import Clock, TimingLog, timed_phase

module_logger = logging.getLogger(__name__)

ConstraintsInput = Union[Constraints, Mapping[str, Any], None]
OptionsInput = Union[GroupingOptions, Mapping[str, Any], None]


class EvaluationError(Exception):
    """Error loading evaluation input from the store."""
    pass


@dataclass(frozen=True)
class EvaluationRequest:
    """One evaluation in a batch."""

    candidates: Tuple[Question, ...]
    constraints: ConstraintsInput = None
    trigger_logs: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class PerformanceCheck:
    """
    Result of the synthetic latency self-check.

    Attributes:
        passed: True when the evaluation met the latency limit
        processing_time_ms: Measured evaluation time
        sla_ms: Limit it was measured against
        sample_size: Synthetic questions evaluated
        selected_count: Questions the evaluation selected
        algorithm: Strategy exercised
    """

    passed: bool
    processing_time_ms: float
    sla_ms: float
    sample_size: int
    selected_count: int
    algorithm: SelectionAlgorithm


def _coerce_constraints(constraints: ConstraintsInput) -> Constraints:
    if constraints is None:
        return Constraints()
    if isinstance(constraints, Constraints):
        return constraints
    if isinstance(constraints, Mapping):
        return Constraints.from_dict(constraints)
    raise ValidationError(
        f"constraints must be Constraints or a mapping, got {type(constraints).__name__}",
        field="constraints",
    )


def _coerce_options(options: OptionsInput) -> GroupingOptions:
    if options is None:
        return GroupingOptions()
    if isinstance(options, GroupingOptions):
        return options
    if isinstance(options, Mapping):
        return GroupingOptions.from_dict(options)
    raise ValidationError(
        f"options must be GroupingOptions or a mapping, got {type(options).__name__}",
        field="options",
    )


def _check_candidates(candidates: Sequence[Any]) -> List[Question]:
    questions = list(candidates)
    bad = [i for i, q in enumerate(questions) if not isinstance(q, Question)]
    if bad:
        raise ValidationError(
            f"Candidates must be Question instances (bad positions: {bad[:5]})",
            field="candidates",
        )
    return questions


def synthetic_questions(sample_size: int, seed: int = 42) -> List[Question]:
    """Deterministic synthetic workload for the latency self-check."""
    rng = random.Random(seed)
    topics = ("service", "pricing", "product", "delivery", "staff")
    return [
        Question(
            id=f"perf-{i}",
            text=f"Synthetic question {i} about {topics[i % len(topics)]} experience",
            priority_weight=rng.randint(1, 5),
            estimated_duration_seconds=float(rng.randint(5, 40)),
            category=topics[i % len(topics)],
            keywords=frozenset({topics[i % len(topics)], f"kw{rng.randint(0, 9)}"}),
        )
        for i in range(sample_size)
    ]


class QuestionEvaluationService:
    """
    Boundary service for question selection and grouping.

    Dependencies are passed in rather than looked up, so tests can supply
    fakes and several services can coexist.

    Args:
        store: Source of questions for the ``*_for_business`` calls
        cache: Optional cache for grouping results
        logger: Logger to report to (module logger by default)
        clock: Seconds clock used to time evaluations
        sla_ms: Latency limit for one evaluation

    Example:
        >>> service = QuestionEvaluationService()
        >>> result = service.evaluate(questions, {"max_duration_seconds": 60})
        >>> result.performance_valid
        True
    """

    def __init__(
        self,
        store: Optional[QuestionStore] = None,
        cache: Optional[BoundedTTLCache] = None,
        logger: Optional[logging.Logger] = None,
        clock: Clock = time.perf_counter,
        sla_ms: float = PERFORMANCE_THRESHOLDS.evaluation_sla_ms,
    ):
        self.store = store
        self.cache = cache
        self.logger = logger or module_logger
        self.clock = clock
        self.sla_ms = sla_ms

    # ─────────────────────────────────────────────────────────────────────────
    # Selection
    # ─────────────────────────────────────────────────────────────────────────

    def evaluate(
        self,
        candidates: Sequence[Question],
        constraints: ConstraintsInput = None,
        trigger_logs: Sequence[Any] = (),
    ) -> EvaluationResult:
        """
        Select the questions to ask for one call.

        Args:
            candidates: Eligible questions
            constraints: Constraints, a raw mapping, or None for defaults
            trigger_logs: Opaque trigger metadata, copied onto the result

        Returns:
            EvaluationResult with timing and latency flag attached

        Raises:
            ValidationError: If constraints or candidates are malformed
        """
        timing = TimingLog(clock=self.clock)
        start = self.clock()
        return self._evaluate(candidates, constraints, trigger_logs, timing, start)

    def evaluate_for_business(
        self,
        business_id: str,
        constraints: ConstraintsInput = None,
        trigger_logs: Sequence[Any] = (),
    ) -> EvaluationResult:
        """
        Load a business's candidates from the store and evaluate them.

        Raises:
            EvaluationError: If no store is configured or the read fails
            ValidationError: If constraints are malformed
        """
        constraints = _coerce_constraints(constraints)
        timing = TimingLog(clock=self.clock)
        start = self.clock()
        with timed_phase(timing, "load"):
            candidates = self._load_questions(business_id)
        self.logger.debug(f"Loaded {len(candidates)} candidates for business {business_id}")
        return self._evaluate(candidates, constraints, trigger_logs, timing, start)

    def evaluate_many(
        self,
        requests: Sequence[EvaluationRequest],
        batch_size: int = PERFORMANCE_THRESHOLDS.batch_size,
    ) -> BatchReport:
        """
        Evaluate several independent requests with bounded concurrency.

        A request that fails is reported in the BatchReport; the others
        still complete.
        """
        self.logger.info(f"Evaluating {len(requests)} requests in batches of {batch_size}")
        return run_in_batches(
            requests,
            lambda req: self.evaluate(req.candidates, req.constraints, req.trigger_logs),
            batch_size=batch_size,
        )

    def _evaluate(
        self,
        candidates: Sequence[Question],
        constraints: ConstraintsInput,
        trigger_logs: Sequence[Any],
        timing: TimingLog,
        start: float,
    ) -> EvaluationResult:
        with timed_phase(timing, "validation"):
            constraints = _coerce_constraints(constraints)
            questions = _check_candidates(candidates)

        with timed_phase(timing, "selection"):
            result = select_questions(questions, constraints)

        elapsed_ms = (self.clock() - start) * 1000
        return self._finalise(result, timing, elapsed_ms, trigger_logs)

    def _finalise(
        self,
        result: EvaluationResult,
        timing: TimingLog,
        elapsed_ms: float,
        trigger_logs: Sequence[Any],
    ) -> EvaluationResult:
        warnings = list(result.warnings)
        performance_valid = elapsed_ms <= self.sla_ms
        if not performance_valid:
            message = (
                f"Evaluation took {elapsed_ms:.1f}ms, over the {self.sla_ms:.0f}ms limit "
                f"(slowest stage: {timing.slowest_stage()})"
            )
            self.logger.warning(message)
            warnings.append(message)

        result = replace(
            result,
            processing_time_ms=elapsed_ms,
            performance_valid=performance_valid,
            processing_stages=dict(timing.stages),
            trigger_logs=tuple(trigger_logs),
            warnings=tuple(warnings),
        )
        self.logger.info(
            f"Selected {result.question_count} questions "
            f"({result.estimated_duration_seconds:.1f}/{result.max_duration_seconds:.0f}s) "
            f"via {result.algorithm.value} in {elapsed_ms:.1f}ms"
        )
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Grouping
    # ─────────────────────────────────────────────────────────────────────────

    def group(
        self,
        candidates: Sequence[Question],
        options: OptionsInput = None,
        existing_groups: Optional[Sequence[ExistingGroup]] = None,
    ) -> GroupingResult:
        """
        Group candidates into conversational topic groups.

        Results are served from the cache when one is configured and the
        same inputs were grouped recently.
        """
        options = _coerce_options(options)
        questions = tuple(_check_candidates(candidates))
        existing = tuple(existing_groups or ())

        key = ("group", questions, options, existing)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                self.logger.debug(f"Grouping cache hit for {len(questions)} questions")
                return cached

        result = group_questions(questions, options, existing)
        self.logger.info(
            f"Formed {result.total_groups} groups from {len(questions)} questions "
            f"({len(result.ungrouped)} ungrouped) in {result.processing_time_ms:.1f}ms"
        )

        if self.cache is not None:
            self.cache.put(key, result)
        return result

    def group_for_business(self, business_id: str, options: OptionsInput = None) -> GroupingResult:
        """Load a business's candidates and persisted groups, then group them."""
        candidates = self._load_questions(business_id)
        existing = self._load_groups(business_id)
        return self.group(candidates, options, existing)

    def find_optimal_grouping(
        self,
        candidates: Sequence[Question],
        max_call_duration: float,
    ) -> OptimalGrouping:
        """Search grouping profiles for the best fit to one call."""
        return find_optimal_grouping(_check_candidates(candidates), max_call_duration)

    # ─────────────────────────────────────────────────────────────────────────
    # Introspection
    # ─────────────────────────────────────────────────────────────────────────

    def available_strategies(self) -> List[Dict[str, str]]:
        return available_strategies()

    def recommend_algorithm(
        self,
        candidates: Sequence[Question],
        preference: Union[str, AlgorithmPreference] = AlgorithmPreference.BALANCED,
    ) -> SelectionAlgorithm:
        """Suggest a strategy for ``candidates``; see ``selection.recommend_algorithm``."""
        algorithm = recommend_algorithm(candidates, preference)
        self.logger.debug(
            f"Recommended {algorithm.value} for {len(candidates)} candidates "
            f"(preference {AlgorithmPreference.from_name(preference).value})"
        )
        return algorithm

    def validate_performance_requirement(
        self,
        sample_size: int = PERFORMANCE_THRESHOLDS.self_check_sample_size,
        max_duration_seconds: float = PERFORMANCE_THRESHOLDS.self_check_duration_seconds,
        algorithm: SelectionAlgorithm = SelectionAlgorithm.GREEDY_PRIORITY,
        seed: int = 42,
    ) -> PerformanceCheck:
        """
        Run a deterministic synthetic evaluation and check its latency.

        Returns:
            PerformanceCheck describing the run
        """
        questions = synthetic_questions(sample_size, seed)
        constraints = Constraints(
            max_duration_seconds=max_duration_seconds,
            priority_threshold=1,
            algorithm=algorithm,
        )
        result = self.evaluate(questions, constraints)
        check = PerformanceCheck(
            passed=result.performance_valid,
            processing_time_ms=result.processing_time_ms,
            sla_ms=self.sla_ms,
            sample_size=sample_size,
            selected_count=result.question_count,
            algorithm=result.algorithm,
        )
        self.logger.info(
            f"Performance check {'passed' if check.passed else 'FAILED'}: "
            f"{check.processing_time_ms:.1f}ms for {sample_size} questions"
        )
        return check

    # ─────────────────────────────────────────────────────────────────────────
    # Store access
    # ─────────────────────────────────────────────────────────────────────────

    def _require_store(self) -> QuestionStore:
        if self.store is None:
            raise EvaluationError("No question store configured")
        return self.store

    def _load_questions(self, business_id: str) -> List[Question]:
        store = self._require_store()
        try:
            return list(store.list_questions(business_id))
        except Exception as e:
            raise EvaluationError(f"Failed to load questions for {business_id}: {e}") from e

    def _load_groups(self, business_id: str) -> List[ExistingGroup]:
        store = self._require_store()
        try:
            return list(store.list_question_groups(business_id))
        except Exception as e:
            raise EvaluationError(f"Failed to load question groups for {business_id}: {e}") from e


def evaluate_questions(
    candidates: Sequence[Question],
    constraints: ConstraintsInput = None,
    trigger_logs: Sequence[Any] = (),
) -> EvaluationResult:
    """
    Evaluate candidates with a default service.

    Example:
        >>> result = evaluate_questions(questions, {"max_duration_seconds": 50})
        >>> result.estimated_duration_seconds
        45.0
    """
    return QuestionEvaluationService().evaluate(candidates, constraints, trigger_logs)
