"""
Input Validation Utilities

Validates raw caller payloads (question dicts, constraint dicts) before
they are turned into models.

Models validate themselves in ``__post_init__``; the functions here cover
the shape of untrusted JSON so failures carry every problem found rather
than only the first one.
"""

from __future__ import annotations

from typing import Any, Mapping


QUESTION_TYPES = (
    "text",
    "rating",
    "multiple_choice",
    "yes_no",
    "scale",
    "checkbox",
)

_NUMERIC_QUESTION_FIELDS = (
    "estimated_duration_seconds",
    "estimated_tokens",
    "historical_duration_seconds",
)
_STRING_QUESTION_FIELDS = ("topic_category", "category")


class ValidationError(ValueError):
    """Raised when caller input fails validation."""

    def __init__(self, message: str, field: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.field = field
        self.errors = errors or []


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_question_dict(data: Mapping[str, Any]) -> None:
    """
    Validate a raw question payload.

    Checks presence and types of the required fields. Range checks that
    depend on the question type live in the model itself.

    Args:
        data: Question mapping (typically parsed JSON)

    Raises:
        ValidationError: If the payload is malformed; ``errors`` lists
            every problem found.
    """
    if not isinstance(data, Mapping):
        raise ValidationError(
            f"Question payload must be an object, got {type(data).__name__}",
            field="question",
        )

    errors: list[str] = []

    for key in ("id", "text"):
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            errors.append(f"'{key}' must be a non-empty string")

    weight = data.get("priority_weight")
    if not isinstance(weight, int) or isinstance(weight, bool):
        errors.append("'priority_weight' must be an integer")
    elif not 1 <= weight <= 5:
        errors.append(f"'priority_weight' must be in [1, 5], got {weight}")

    for key in _NUMERIC_QUESTION_FIELDS:
        value = data.get(key)
        if value is None:
            continue
        if not _is_number(value):
            errors.append(f"'{key}' must be a number")
        elif value < 0:
            errors.append(f"'{key}' must be >= 0, got {value}")

    for key in _STRING_QUESTION_FIELDS:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            errors.append(f"'{key}' must be a string")

    keywords = data.get("keywords")
    if keywords is not None:
        if not isinstance(keywords, (list, tuple)) or not all(
            isinstance(k, str) for k in keywords
        ):
            errors.append("'keywords' must be a list of strings")

    qtype = data.get("type", "text")
    if qtype not in QUESTION_TYPES:
        errors.append(f"'type' must be one of {', '.join(QUESTION_TYPES)}, got {qtype!r}")

    if errors:
        qid = data.get("id", "<unknown>")
        raise ValidationError(
            f"Invalid question {qid}: {errors[0]}",
            field="question",
            errors=errors,
        )


def validate_constraints_dict(data: Mapping[str, Any]) -> None:
    """
    Validate a raw constraints payload.

    Only known keys are accepted so typos fail loudly instead of
    silently falling back to defaults.

    Raises:
        ValidationError: If the payload is malformed
    """
    if not isinstance(data, Mapping):
        raise ValidationError(
            f"Constraints must be an object, got {type(data).__name__}",
            field="constraints",
        )

    allowed = {"max_duration_seconds", "priority_threshold", "algorithm"}
    errors: list[str] = []

    unknown = sorted(set(data) - allowed)
    if unknown:
        errors.append(f"Unknown constraint keys: {', '.join(unknown)}")

    duration = data.get("max_duration_seconds")
    if duration is not None and not _is_number(duration):
        errors.append("'max_duration_seconds' must be a number")

    threshold = data.get("priority_threshold")
    if threshold is not None and (
        not isinstance(threshold, int) or isinstance(threshold, bool)
    ):
        errors.append("'priority_threshold' must be an integer")

    algorithm = data.get("algorithm")
    if algorithm is not None and not isinstance(algorithm, str):
        errors.append("'algorithm' must be a string")

    if errors:
        raise ValidationError(
            f"Invalid constraints: {errors[0]}",
            field="constraints",
            errors=errors,
        )
