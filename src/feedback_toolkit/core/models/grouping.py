"""
Module: grouping

Purpose:
    Result types for topic grouping: the groups formed, the questions that
    could not be placed, and caller-supplied existing groups.

Key Classes:
    - GroupedQuestion: A question placed in a group with its score
    - TopicGroup: A coherent set of questions asked together
    - UngroupedQuestion: A question left out of every group, with reason
    - ExistingGroup: A previously persisted group to extend
    - GroupingResult: Groups + ungrouped + summary metadata
    - OptimalGrouping: Best grouping found by configuration search

Dependencies:
    - dataclasses (std)
    - functools (std)
    - .questions.Question

Used By:
    - engine.grouping
    - engine.controller
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Tuple

from feedback_toolkit.common.thresholds import GROUPING_THRESHOLDS

from .questions import Question


@dataclass(frozen=True)
class GroupedQuestion:
    """A question inside a group and how well it fits there."""

    question: Question
    compatibility_score: float
    estimated_duration: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.compatibility_score <= 1.0:
            raise ValueError(
                f"compatibility_score must be in [0, 1]: {self.compatibility_score}"
            )


@dataclass(frozen=True)
class TopicGroup:
    """
    Questions asked together as one conversational block (immutable).

    Attributes:
        group_id: Existing group id, or a generated ``new-<topic>-<n>`` id
        group_name: Display name
        topic_category: Shared topic of the members
        questions: Members in asking order
        average_compatibility: Mean pairwise similarity of members
        priority_boost: Multiplier >= 1 derived from member priorities
        is_existing: True when the group extends a caller-supplied group

    Invariants:
        - questions is non-empty
        - 0 <= average_compatibility <= 1
        - priority_boost >= 1
    """

    group_id: str
    group_name: str
    topic_category: str
    questions: Tuple[GroupedQuestion, ...]
    average_compatibility: float
    priority_boost: float
    is_existing: bool = False

    def __post_init__(self) -> None:
        """Validate group on construction."""
        if not self.questions:
            raise ValueError(f"Group {self.group_id} has no questions")
        if not 0.0 <= self.average_compatibility <= 1.0:
            raise ValueError(
                f"average_compatibility must be in [0, 1]: {self.average_compatibility}"
            )
        if self.priority_boost < 1.0:
            raise ValueError(f"priority_boost must be >= 1: {self.priority_boost}")

    @cached_property
    def total_duration(self) -> float:
        """Sum of member durations in seconds."""
        return float(sum(gq.estimated_duration for gq in self.questions))

    @property
    def size(self) -> int:
        return len(self.questions)

    @property
    def question_ids(self) -> Tuple[str, ...]:
        return tuple(gq.question.id for gq in self.questions)

    def __repr__(self) -> str:
        return (
            f"TopicGroup({self.group_id}, size={self.size}, "
            f"compat={self.average_compatibility:.2f})"
        )


@dataclass(frozen=True)
class UngroupedQuestion:
    """A question that was not placed in any group."""

    question: Question
    reason: str


@dataclass(frozen=True)
class ExistingGroup:
    """
    A previously persisted group offered for extension.

    ``estimated_duration_seconds`` is the group's historical average
    question duration, used to score duration fit.
    """

    group_id: str
    group_name: str
    topic_category: str
    estimated_duration_seconds: float = GROUPING_THRESHOLDS.default_group_duration_seconds

    def __post_init__(self) -> None:
        if not self.group_id:
            raise ValueError("existing group id must not be empty")
        if self.estimated_duration_seconds < 0:
            raise ValueError(
                f"estimated_duration_seconds must be >= 0: {self.estimated_duration_seconds}"
            )


@dataclass(frozen=True)
class GroupingResult:
    """
    Outcome of one grouping run (immutable).

    Invariants:
        - Every candidate appears exactly once across groups and ungrouped
    """

    groups: Tuple[TopicGroup, ...]
    ungrouped: Tuple[UngroupedQuestion, ...]
    processing_time_ms: float = 0.0

    def __post_init__(self) -> None:
        ids = [qid for g in self.groups for qid in g.question_ids]
        ids.extend(u.question.id for u in self.ungrouped)
        if len(ids) != len(set(ids)):
            raise ValueError("Question placed more than once in grouping result")

    @property
    def total_groups(self) -> int:
        return len(self.groups)

    @cached_property
    def average_group_size(self) -> float:
        if not self.groups:
            return 0.0
        return sum(g.size for g in self.groups) / len(self.groups)

    @cached_property
    def grouping_confidence(self) -> float:
        """Mean of the groups' average compatibility (0 with no groups)."""
        if not self.groups:
            return 0.0
        return sum(g.average_compatibility for g in self.groups) / len(self.groups)

    @property
    def grouped_question_count(self) -> int:
        return sum(g.size for g in self.groups)

    def find_group(self, question_id: str) -> TopicGroup | None:
        """Return the group containing a question, if any."""
        for group in self.groups:
            if question_id in group.question_ids:
                return group
        return None

    def __repr__(self) -> str:
        return (
            f"GroupingResult(groups={self.total_groups}, "
            f"ungrouped={len(self.ungrouped)}, "
            f"confidence={self.grouping_confidence:.2f})"
        )


@dataclass(frozen=True)
class OptimalGrouping:
    """
    Best grouping found by configuration search.

    Attributes:
        grouping: Winning grouping result
        max_questions_per_call: Questions that fit one call at mean duration
        estimated_coverage: min(1, max_questions_per_call / candidates)
        profile: Winning (max_group_size, min_compatibility) pair
        score: Winning composite score
    """

    grouping: GroupingResult
    max_questions_per_call: int
    estimated_coverage: float
    profile: Tuple[int, float]
    score: float

    @property
    def groups(self) -> Tuple[TopicGroup, ...]:
        return self.grouping.groups
