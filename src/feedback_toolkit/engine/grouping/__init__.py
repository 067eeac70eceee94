"""
Grouping Package

Clusters compatible questions into conversational groups.

Exports:
    - group_questions: Main grouping entry point
    - find_optimal_grouping: Profile search
    - GroupingOptions: Grouping options
"""

from .grouper import UNGROUPED_REASON, Grouper, group_questions
from .options import GroupingOptions
from .search import find_optimal_grouping, max_questions_per_call, score_grouping
from .similarity import (
    existing_group_compatibility,
    question_similarity,
    similarity_matrix,
)

__all__ = [
    "group_questions",
    "Grouper",
    "UNGROUPED_REASON",
    "GroupingOptions",
    "find_optimal_grouping",
    "max_questions_per_call",
    "score_grouping",
    "existing_group_compatibility",
    "question_similarity",
    "similarity_matrix",
]
