"""
Module: engine.selection.config

Purpose:
    Per-call constraints for the selector.
    Immutable configuration with validation on construction.

Key Classes:
    - Constraints: Budget, priority threshold and strategy for one call

Dependencies:
    - dataclasses (std)
    - common.thresholds: Defaults and minimum call duration

Used By:
    - engine.selection.selector
    - engine.controller
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from feedback_toolkit.common.thresholds import SELECTION_THRESHOLDS
from feedback_toolkit.core.schemas.validator import (
    ValidationError,
    validate_constraints_dict,
)

from .algorithm import SelectionAlgorithm


@dataclass(frozen=True)
class Constraints:
    """
    Selection constraints for one evaluation (immutable).

    Attributes:
        max_duration_seconds: Hard time budget for the call
        priority_threshold: Questions with a lower weight are dropped
        algorithm: Strategy to run

    Invariants:
        - max_duration_seconds >= 30
        - 1 <= priority_threshold <= 5

    Example:
        >>> Constraints(max_duration_seconds=60, algorithm="dynamic_programming").algorithm
        <SelectionAlgorithm.DYNAMIC_PROGRAMMING: 'dynamic_programming'>
    """

    max_duration_seconds: float = SELECTION_THRESHOLDS.default_call_duration_seconds
    priority_threshold: int = SELECTION_THRESHOLDS.default_priority_threshold
    algorithm: SelectionAlgorithm = SelectionAlgorithm.GREEDY_PRIORITY

    def __post_init__(self) -> None:
        """Validate constraints on construction."""
        object.__setattr__(self, "algorithm", SelectionAlgorithm.from_name(self.algorithm))

        minimum = SELECTION_THRESHOLDS.min_call_duration_seconds
        if isinstance(self.max_duration_seconds, bool) or not isinstance(
            self.max_duration_seconds, (int, float)
        ):
            raise ValidationError(
                f"max_duration_seconds must be a number: {self.max_duration_seconds!r}",
                field="max_duration_seconds",
            )
        if self.max_duration_seconds < minimum:
            raise ValidationError(
                f"max_duration_seconds must be >= {minimum:g}: {self.max_duration_seconds}",
                field="max_duration_seconds",
            )

        if isinstance(self.priority_threshold, bool) or not isinstance(self.priority_threshold, int):
            raise ValidationError(
                f"priority_threshold must be an integer: {self.priority_threshold!r}",
                field="priority_threshold",
            )
        if not 1 <= self.priority_threshold <= 5:
            raise ValidationError(
                f"priority_threshold must be 1-5: {self.priority_threshold}",
                field="priority_threshold",
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Constraints":
        """
        Build constraints from raw caller input.

        Missing keys take their defaults.

        Raises:
            ValidationError: If the mapping is malformed or out of range
        """
        validate_constraints_dict(data)
        kwargs = {k: v for k, v in data.items() if v is not None}
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {
            "max_duration_seconds": self.max_duration_seconds,
            "priority_threshold": self.priority_threshold,
            "algorithm": self.algorithm.value,
        }
