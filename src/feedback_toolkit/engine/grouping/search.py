"""
Module: engine.grouping.search

Purpose:
    Try a few grouping profiles and keep the one that best balances
    coverage, compatibility and group size for a call of a given length.

Key Functions:
    - find_optimal_grouping(): Best grouping over the configured profiles

Scoring:
    score = 0.5 * coverage + 0.3 * grouping_confidence + 0.2 * balance
    where coverage is the fraction of candidates placed in a group and
    balance = 1 / (|average_group_size - 3| + 1). The first profile wins
    ties.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

from feedback_toolkit.common.thresholds import GROUPING_THRESHOLDS, GroupingThresholds
from feedback_toolkit.core.models.grouping import GroupingResult, OptimalGrouping
from feedback_toolkit.core.models.questions import Question
from feedback_toolkit.core.schemas.validator import ValidationError
from feedback_toolkit.engine.duration import estimate_duration

from .grouper import group_questions
from .options import GroupingOptions

logger = logging.getLogger(__name__)


def score_grouping(
    result: GroupingResult,
    candidate_count: int,
    thresholds: GroupingThresholds = GROUPING_THRESHOLDS,
) -> float:
    """Composite score of a grouping result."""
    coverage = result.grouped_question_count / candidate_count if candidate_count else 0.0
    balance = 1.0 / (abs(result.average_group_size - thresholds.search_ideal_group_size) + 1.0)
    return (
        thresholds.search_coverage_weight * coverage
        + thresholds.search_compatibility_weight * result.grouping_confidence
        + thresholds.search_balance_weight * balance
    )


def max_questions_per_call(candidates: Sequence[Question], max_call_duration: float) -> int:
    """Questions of mean duration that fit in one call (all of them if mean is 0)."""
    mean = sum(estimate_duration(q) for q in candidates) / len(candidates)
    if mean <= 0:
        return len(candidates)
    return int(math.floor(max_call_duration / mean))


def find_optimal_grouping(
    candidates: Sequence[Question],
    max_call_duration: float,
    thresholds: GroupingThresholds = GROUPING_THRESHOLDS,
) -> OptimalGrouping:
    """
    Search grouping profiles for the best-scoring grouping.

    Args:
        candidates: Questions to group (must be non-empty)
        max_call_duration: Call length in seconds

    Returns:
        OptimalGrouping with the winning grouping and per-call capacity

    Raises:
        ValidationError: If candidates is empty or the duration is not positive
    """
    candidates = list(candidates)
    if not candidates:
        raise ValidationError("No questions provided for grouping", field="candidates")
    if max_call_duration <= 0:
        raise ValidationError(
            f"max_call_duration must be > 0: {max_call_duration}",
            field="max_call_duration",
        )

    best: Optional[GroupingResult] = None
    best_profile = thresholds.search_profiles[0]
    best_score = -math.inf

    for size, min_compat in thresholds.search_profiles:
        options = GroupingOptions(max_group_size=size, min_compatibility_score=min_compat)
        result = group_questions(candidates, options)
        score = score_grouping(result, len(candidates), thresholds)
        logger.debug(f"Profile size={size} compat={min_compat}: score {score:.3f}")
        if score > best_score:
            best, best_profile, best_score = result, (size, min_compat), score

    per_call = max_questions_per_call(candidates, max_call_duration)
    coverage = min(1.0, per_call / len(candidates))

    logger.info(
        f"Optimal grouping: profile {best_profile}, {best.total_groups} groups, "
        f"{per_call} questions per call"
    )
    return OptimalGrouping(
        grouping=best,
        max_questions_per_call=per_call,
        estimated_coverage=coverage,
        profile=best_profile,
        score=best_score,
    )
