"""
Module: questions

Purpose:
    Provides the Question dataclass, the unit passed between the question
    store, the selector and the topic grouper. Each question carries a
    type-specific details variant that is validated when it is built, so
    a malformed rating scale or choice list never reaches the engines.

Key Classes:
    - QuestionType: Enum of supported answer formats
    - TextDetails / RatingDetails / ChoiceDetails / ScaleDetails: Variants
    - Question: Immutable question with priority, duration and topic info

Dependencies:
    - dataclasses (std)
    - enum (std)
    - core.schemas.validator.ValidationError

Used By:
    - engine.duration
    - engine.selection
    - engine.grouping
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional, Tuple, Union

from feedback_toolkit.common.thresholds import GROUPING_THRESHOLDS
from feedback_toolkit.core.schemas.validator import ValidationError


MIN_PRIORITY = 1
MAX_PRIORITY = 5

MAX_TEXT_LENGTH = 10_000
MIN_RATING_SCALE = 2
MAX_RATING_SCALE = 10


class QuestionType(Enum):
    """Answer format of a question."""

    TEXT = "text"
    RATING = "rating"
    MULTIPLE_CHOICE = "multiple_choice"
    YES_NO = "yes_no"
    SCALE = "scale"
    CHECKBOX = "checkbox"

    @classmethod
    def from_name(cls, name: str) -> "QuestionType":
        """Parse a type name, raising ValidationError for unknown names."""
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(t.value for t in cls)
            raise ValidationError(
                f"Unknown question type {name!r} (expected one of: {valid})",
                field="type",
            ) from None


# ─────────────────────────────────────────────────────────────────────────────
# Type-specific details
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class TextDetails:
    """Free-text answer. ``max_length`` of None means unlimited."""

    max_length: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_length is not None and not 1 <= self.max_length <= MAX_TEXT_LENGTH:
            raise ValidationError(
                f"max_length must be 1-{MAX_TEXT_LENGTH}: {self.max_length}",
                field="max_length",
            )


@dataclass(frozen=True)
class RatingDetails:
    """Numeric rating from 1 to ``scale``."""

    scale: int = 5

    def __post_init__(self) -> None:
        if not MIN_RATING_SCALE <= self.scale <= MAX_RATING_SCALE:
            raise ValidationError(
                f"rating scale must be {MIN_RATING_SCALE}-{MAX_RATING_SCALE}: {self.scale}",
                field="scale",
            )


@dataclass(frozen=True)
class ChoiceDetails:
    """Fixed choice list for multiple_choice and checkbox questions."""

    choices: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "choices", tuple(self.choices))
        if len(self.choices) < 2:
            raise ValidationError(
                f"choice questions need at least 2 choices, got {len(self.choices)}",
                field="choices",
            )
        if any(not isinstance(c, str) for c in self.choices):
            raise ValidationError("choices must be strings", field="choices")
        if any(not c.strip() for c in self.choices):
            raise ValidationError("choices must not be blank", field="choices")


@dataclass(frozen=True)
class ScaleDetails:
    """Bounded numeric scale such as 0-10."""

    min_value: int = 1
    max_value: int = 10

    def __post_init__(self) -> None:
        if self.min_value >= self.max_value:
            raise ValidationError(
                f"scale min_value must be below max_value: "
                f"{self.min_value} >= {self.max_value}",
                field="scale",
            )


QuestionDetails = Union[TextDetails, RatingDetails, ChoiceDetails, ScaleDetails]

# Which details variant each type carries (None = no details)
_DETAILS_BY_TYPE = {
    QuestionType.TEXT: TextDetails,
    QuestionType.RATING: RatingDetails,
    QuestionType.MULTIPLE_CHOICE: ChoiceDetails,
    QuestionType.CHECKBOX: ChoiceDetails,
    QuestionType.SCALE: ScaleDetails,
    QuestionType.YES_NO: None,
}

# Types whose details can be defaulted when omitted
_DEFAULTABLE = {QuestionType.TEXT, QuestionType.RATING}


@dataclass(frozen=True)
class Question:
    """
    Candidate feedback question (immutable).

    Attributes:
        id: Opaque unique identifier
        text: Spoken content of the question
        priority_weight: Importance from 1 (optional) to 5 (critical)
        estimated_duration_seconds: Explicit speaking time, if known
        estimated_tokens: Content size used when no duration is given
        topic_category: Fine topic label
        category: Coarse category label
        keywords: Topic keywords used for similarity
        type: Answer format
        details: Type-specific details variant
        trigger_reasons: Opaque metadata from the eligibility layer
        historical_duration_seconds: Measured average speaking time from past calls

    Invariants:
        - 1 <= priority_weight <= 5
        - Durations and token counts are non-negative when present
        - details matches type

    Example:
        >>> q = Question(id="q1", text="How was your visit?", priority_weight=4,
        ...              estimated_duration_seconds=15)
        >>> q.effective_topic
        'general'
    """

    id: str
    text: str
    priority_weight: int
    estimated_duration_seconds: Optional[float] = None
    estimated_tokens: Optional[int] = None
    topic_category: Optional[str] = None
    category: Optional[str] = None
    keywords: FrozenSet[str] = field(default_factory=frozenset)
    type: QuestionType = QuestionType.TEXT
    details: Optional[QuestionDetails] = None
    trigger_reasons: Tuple[str, ...] = ()
    historical_duration_seconds: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate question on construction."""
        if not self.id:
            raise ValidationError("question id must not be empty", field="id")

        if isinstance(self.priority_weight, bool) or not isinstance(self.priority_weight, int):
            raise ValidationError(
                f"priority_weight must be an integer: {self.priority_weight!r}",
                field="priority_weight",
            )
        if not MIN_PRIORITY <= self.priority_weight <= MAX_PRIORITY:
            raise ValidationError(
                f"priority_weight must be {MIN_PRIORITY}-{MAX_PRIORITY}: {self.priority_weight}",
                field="priority_weight",
            )

        for name in ("estimated_duration_seconds", "historical_duration_seconds"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValidationError(f"{name} must be >= 0: {value}", field=name)
        if self.estimated_tokens is not None and self.estimated_tokens < 0:
            raise ValidationError(
                f"estimated_tokens must be >= 0: {self.estimated_tokens}",
                field="estimated_tokens",
            )

        # Normalise collection fields so questions stay hashable
        if not isinstance(self.keywords, frozenset):
            object.__setattr__(self, "keywords", frozenset(self.keywords))
        if not isinstance(self.trigger_reasons, tuple):
            object.__setattr__(self, "trigger_reasons", tuple(self.trigger_reasons))
        if not isinstance(self.type, QuestionType):
            object.__setattr__(self, "type", QuestionType.from_name(self.type))

        self._check_details()

    def _check_details(self) -> None:
        expected = _DETAILS_BY_TYPE[self.type]

        if expected is None:
            if self.details is not None:
                raise ValidationError(
                    f"{self.type.value} questions take no details, got "
                    f"{type(self.details).__name__}",
                    field="details",
                )
            return

        if self.details is None:
            if self.type not in _DEFAULTABLE:
                raise ValidationError(
                    f"{self.type.value} questions require {expected.__name__}",
                    field="details",
                )
            object.__setattr__(self, "details", expected())
            return

        if not isinstance(self.details, expected):
            raise ValidationError(
                f"{self.type.value} questions require {expected.__name__}, got "
                f"{type(self.details).__name__}",
                field="details",
            )

    # ─────────────────────────────────────────────────────────────────────────
    # Derived Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def effective_topic(self) -> str:
        """Topic used for grouping: topic_category, then category, then 'general'."""
        return self.topic_category or self.category or GROUPING_THRESHOLDS.fallback_topic

    @property
    def effective_category(self) -> str:
        """Category used for similarity, 'general' when absent."""
        return self.category or GROUPING_THRESHOLDS.fallback_topic

    def __repr__(self) -> str:
        return (
            f"Question(id={self.id!r}, priority={self.priority_weight}, "
            f"topic={self.effective_topic!r})"
        )
