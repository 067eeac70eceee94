"""Serialization helpers."""

from .serialization import (
    evaluation_result_to_dict,
    existing_group_from_dict,
    grouping_result_to_dict,
    load_existing_groups_json,
    load_questions_json,
    optimal_grouping_to_dict,
    question_from_dict,
    question_to_dict,
)

__all__ = [
    "evaluation_result_to_dict",
    "existing_group_from_dict",
    "grouping_result_to_dict",
    "load_existing_groups_json",
    "load_questions_json",
    "optimal_grouping_to_dict",
    "question_from_dict",
    "question_to_dict",
]
