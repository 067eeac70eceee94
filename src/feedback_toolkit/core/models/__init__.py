"""
Core Models Package

Immutable, validated data models shared by the selection and grouping
engines.

All models in this package are frozen dataclasses. This ensures:
1. No accidental mutation while a result is being assembled
2. Safe to pass between worker threads
3. Questions can be used as dict keys or in sets (grouping cache keys)
"""

from .questions import (
    Question,
    QuestionType,
    TextDetails,
    RatingDetails,
    ChoiceDetails,
    ScaleDetails,
)
from .priority import PRIORITY_TIERS, priority_distribution, tier_for_weight
from .evaluation import EvaluationResult, SelectedQuestion
from .grouping import (
    ExistingGroup,
    GroupedQuestion,
    GroupingResult,
    OptimalGrouping,
    TopicGroup,
    UngroupedQuestion,
)

__all__ = [
    # questions
    "Question",
    "QuestionType",
    "TextDetails",
    "RatingDetails",
    "ChoiceDetails",
    "ScaleDetails",
    # priority
    "PRIORITY_TIERS",
    "priority_distribution",
    "tier_for_weight",
    # evaluation
    "EvaluationResult",
    "SelectedQuestion",
    # grouping
    "ExistingGroup",
    "GroupedQuestion",
    "GroupingResult",
    "OptimalGrouping",
    "TopicGroup",
    "UngroupedQuestion",
]
