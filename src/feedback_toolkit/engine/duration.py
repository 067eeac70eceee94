"""
Module: engine.duration

Purpose:
    Estimate how long a question takes to ask, and how far to trust the
    estimate. Pure functions, no I/O.

Key Functions:
    - estimate_duration(): Historical, else explicit, else tokens / speech rate, else 0
    - estimate_from_tokens(): Token-based estimate ignoring measured durations
    - duration_estimate(): Seconds plus the source they came from

Key Classes:
    - DurationSource: Where an estimate came from
    - DurationEstimate: Seconds, source and confidence

Dependencies:
    - common.thresholds: Speech rate constant, confidence by source

Used By:
    - engine.selection.strategies
    - engine.grouping.grouper
    - engine.grouping.search
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from feedback_toolkit.common.thresholds import (
    SECONDS_PER_TOKEN_SPEECH_RATE,
    SELECTION_THRESHOLDS,
)
from feedback_toolkit.core.models.questions import Question


class DurationSource(Enum):
    HISTORICAL = "historical"
    EXPLICIT = "explicit"
    TOKENS = "tokens"


_CONFIDENCE = {
    DurationSource.HISTORICAL: SELECTION_THRESHOLDS.historical_duration_confidence,
    DurationSource.EXPLICIT: SELECTION_THRESHOLDS.explicit_duration_confidence,
    DurationSource.TOKENS: SELECTION_THRESHOLDS.token_duration_confidence,
}


@dataclass(frozen=True)
class DurationEstimate:
    seconds: float
    source: DurationSource

    @property
    def confidence(self) -> float:
        return _CONFIDENCE[self.source]


def estimate_from_tokens(question: Question) -> float:
    """Seconds of speech for the question's token count (0 when unknown)."""
    if question.estimated_tokens is None:
        return 0.0
    return max(0.0, question.estimated_tokens * SECONDS_PER_TOKEN_SPEECH_RATE)


def duration_estimate(question: Question) -> DurationEstimate:
    """
    Estimate the speaking time of a question and record its source.

    Measured history beats a caller-supplied duration, which beats the
    token estimate. A question with none of them is free (0 seconds).
    """
    if question.historical_duration_seconds is not None:
        return DurationEstimate(
            max(0.0, float(question.historical_duration_seconds)), DurationSource.HISTORICAL
        )
    if question.estimated_duration_seconds is not None:
        return DurationEstimate(
            max(0.0, float(question.estimated_duration_seconds)), DurationSource.EXPLICIT
        )
    return DurationEstimate(estimate_from_tokens(question), DurationSource.TOKENS)


def estimate_duration(question: Question) -> float:
    """
    Estimate the speaking time of a question.

    Args:
        question: Question to estimate

    Returns:
        ``historical_duration_seconds`` when present, otherwise
        ``estimated_duration_seconds``, otherwise the token estimate,
        otherwise 0. Never negative.

    Example:
        >>> estimate_duration(Question(id="q", text="...", priority_weight=3,
        ...                            estimated_tokens=42))
        10.0
    """
    return duration_estimate(question).seconds
