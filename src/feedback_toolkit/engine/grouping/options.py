"""
Module: engine.grouping.options

Purpose:
    Options controlling topic grouping. Immutable, validated on
    construction.

Key Classes:
    - GroupingOptions
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from feedback_toolkit.common.thresholds import GROUPING_THRESHOLDS
from feedback_toolkit.core.schemas.validator import ValidationError


@dataclass(frozen=True)
class GroupingOptions:
    """
    Grouping options (immutable).

    Attributes:
        max_group_size: Largest group that may be formed
        min_compatibility_score: Similarity needed to share a group
        use_semantic_similarity: Cluster by similarity instead of topic alone
        preserve_existing_groups: Extend caller-supplied groups first

    Invariants:
        - max_group_size >= 1
        - 0 <= min_compatibility_score <= 1
    """

    max_group_size: int = GROUPING_THRESHOLDS.default_max_group_size
    min_compatibility_score: float = GROUPING_THRESHOLDS.default_min_compatibility
    use_semantic_similarity: bool = True
    preserve_existing_groups: bool = True

    def __post_init__(self) -> None:
        """Validate options on construction."""
        if isinstance(self.max_group_size, bool) or not isinstance(self.max_group_size, int):
            raise ValidationError(
                f"max_group_size must be an integer: {self.max_group_size!r}",
                field="max_group_size",
            )
        if self.max_group_size < 1:
            raise ValidationError(
                f"max_group_size must be >= 1: {self.max_group_size}",
                field="max_group_size",
            )
        if not 0.0 <= self.min_compatibility_score <= 1.0:
            raise ValidationError(
                f"min_compatibility_score must be in [0, 1]: {self.min_compatibility_score}",
                field="min_compatibility_score",
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GroupingOptions":
        """Build options from raw caller input; unknown keys are rejected."""
        allowed = {
            "max_group_size",
            "min_compatibility_score",
            "use_semantic_similarity",
            "preserve_existing_groups",
        }
        unknown = sorted(set(data) - allowed)
        if unknown:
            raise ValidationError(
                f"Unknown grouping option keys: {', '.join(unknown)}",
                field="options",
                errors=[f"unknown key {k!r}" for k in unknown],
            )
        return cls(**{k: v for k, v in data.items() if v is not None})
