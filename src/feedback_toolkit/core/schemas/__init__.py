"""Validation for raw caller input."""

from .validator import (
    QUESTION_TYPES,
    ValidationError,
    validate_constraints_dict,
    validate_question_dict,
)

__all__ = [
    "QUESTION_TYPES",
    "ValidationError",
    "validate_constraints_dict",
    "validate_question_dict",
]
