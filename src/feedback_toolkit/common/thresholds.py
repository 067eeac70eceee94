"""Centralized threshold and magic number configuration.

This module contains the tunable numbers used by selection, grouping and
the evaluation service. Having these in one place makes tuning easier and
documents what each value controls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


# Average speaking rate used to turn a token count into seconds of speech.
TOKENS_PER_SECOND_SPEECH = 4.2
SECONDS_PER_TOKEN_SPEECH_RATE = 1.0 / TOKENS_PER_SECOND_SPEECH


@dataclass
class SelectionThresholds:
    """Thresholds for question selection."""

    # Call budget
    min_call_duration_seconds: float = 30.0  # Shortest call that can be planned
    default_call_duration_seconds: float = 90.0  # Budget when caller gives none
    default_priority_threshold: int = 2  # Questions below this weight are dropped

    # Knapsack guard (dynamic_programming strategy)
    max_dp_capacity_seconds: int = 3600  # Largest whole-second capacity for the table
    max_dp_cells: int = 2_000_000  # Largest items x capacity table before falling back

    # Duration confidence by source
    historical_duration_confidence: float = 0.9
    explicit_duration_confidence: float = 0.7
    token_duration_confidence: float = 0.6

    # Strategy recommendation by candidate count
    small_candidate_count: int = 20  # At or below: exact knapsack is affordable
    large_candidate_count: int = 50  # Above: greedy only


@dataclass
class GroupingThresholds:
    """Thresholds for topic grouping and configuration search."""

    default_max_group_size: int = 4
    default_min_compatibility: float = 0.6
    default_group_duration_seconds: float = 30.0  # Existing group with no history
    fallback_topic: str = "general"

    # Pairwise similarity weights (sum to 1.0)
    same_category_weight: float = 0.3
    same_topic_weight: float = 0.2
    keyword_overlap_weight: float = 0.3
    word_overlap_weight: float = 0.2
    min_significant_word_length: int = 4  # Shorter words are ignored in overlap

    # Compatibility with an existing group
    existing_topic_match_weight: float = 0.4
    existing_category_match_weight: float = 0.3
    existing_duration_weight: float = 0.3

    # Priority boost = max(1, mean priority / divisor)
    priority_boost_divisor: float = 3.0

    # Configuration search: (max_group_size, min_compatibility) profiles
    search_profiles: Tuple[Tuple[int, float], ...] = ((3, 0.7), (4, 0.6), (5, 0.5))
    search_coverage_weight: float = 0.5
    search_compatibility_weight: float = 0.3
    search_balance_weight: float = 0.2
    search_ideal_group_size: float = 3.0


@dataclass
class PerformanceThresholds:
    """Thresholds for the evaluation service."""

    evaluation_sla_ms: float = 500.0  # Soft limit for one evaluation
    batch_size: int = 10  # Items submitted per fan-out batch
    self_check_sample_size: int = 40  # Questions in the synthetic workload
    self_check_duration_seconds: float = 90.0
    cache_capacity: int = 256
    cache_ttl_seconds: float = 300.0


# Global instances
SELECTION_THRESHOLDS = SelectionThresholds()
GROUPING_THRESHOLDS = GroupingThresholds()
PERFORMANCE_THRESHOLDS = PerformanceThresholds()
