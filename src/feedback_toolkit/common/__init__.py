"""Common configuration shared across the toolkit."""

from __future__ import annotations

from .thresholds import (
    GROUPING_THRESHOLDS,
    PERFORMANCE_THRESHOLDS,
    SECONDS_PER_TOKEN_SPEECH_RATE,
    SELECTION_THRESHOLDS,
    TOKENS_PER_SECOND_SPEECH,
    GroupingThresholds,
    PerformanceThresholds,
    SelectionThresholds,
)

__all__ = [
    "GROUPING_THRESHOLDS",
    "PERFORMANCE_THRESHOLDS",
    "SECONDS_PER_TOKEN_SPEECH_RATE",
    "SELECTION_THRESHOLDS",
    "TOKENS_PER_SECOND_SPEECH",
    "GroupingThresholds",
    "PerformanceThresholds",
    "SelectionThresholds",
]
