"""
Module: engine.grouping.grouper

Purpose:
    Cluster compatible questions into conversational groups so a call can
    move through related questions together.

Key Functions:
    - group_questions(): Main entry point for grouping

Key Classes:
    - Grouper: Orchestrates one grouping run

Algorithm:
    1. Extend existing groups with matching, compatible candidates
    2. Partition the rest by effective topic (first-seen order)
    3. Within a topic, greedily cluster by pairwise similarity
       (or treat the whole topic as one cluster)
    4. Split clusters larger than max_group_size by priority
    5. Everything unplaced is reported as ungrouped with a reason

Dependencies:
    - engine.grouping.similarity: Scores
    - engine.grouping.options: GroupingOptions
    - engine.duration: Duration estimates

Used By:
    - engine.grouping.search
    - engine.controller
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from feedback_toolkit.common.thresholds import GROUPING_THRESHOLDS
from feedback_toolkit.core.models.grouping import (
    ExistingGroup,
    GroupedQuestion,
    GroupingResult,
    TopicGroup,
    UngroupedQuestion,
)
from feedback_toolkit.core.models.questions import Question
from feedback_toolkit.engine.duration import estimate_duration

from .options import GroupingOptions
from .similarity import existing_group_compatibility, similarity_matrix

logger = logging.getLogger(__name__)

UNGROUPED_REASON = "Low compatibility with existing groups or insufficient similar questions"


def group_questions(
    candidates: Sequence[Question],
    options: Optional[GroupingOptions] = None,
    existing_groups: Sequence[ExistingGroup] = (),
) -> GroupingResult:
    """
    Group candidate questions by topic and similarity.

    Args:
        candidates: Questions to group (may be empty)
        options: Grouping options (defaults when None)
        existing_groups: Previously persisted groups to extend

    Returns:
        GroupingResult where every candidate appears exactly once

    Example:
        >>> result = group_questions([q1, q2, q3])
        >>> result.groups[0].question_ids
        ('1', '2')
    """
    grouper = Grouper(list(candidates), options or GroupingOptions(), list(existing_groups))
    return grouper.run()


def _priority_boost(questions: Sequence[Question]) -> float:
    mean = sum(q.priority_weight for q in questions) / len(questions)
    return max(1.0, mean / GROUPING_THRESHOLDS.priority_boost_divisor)


def _display_name(topic: str) -> str:
    return topic.replace("_", " ")


def _pairwise_mean(matrix: np.ndarray, indices: List[int]) -> float:
    """Mean similarity over distinct pairs; a lone question is fully compatible."""
    if len(indices) < 2:
        return 1.0
    sub = matrix[np.ix_(indices, indices)]
    pairs = sub[np.triu_indices(len(indices), k=1)]
    return min(1.0, max(0.0, float(np.mean(pairs))))


@dataclass
class Grouper:
    """
    Topic grouping orchestrator.

    Attributes:
        candidates: Questions supplied by the caller
        options: Grouping options
        existing_groups: Groups to extend before forming new ones
    """

    candidates: List[Question]
    options: GroupingOptions
    existing_groups: List[ExistingGroup] = field(default_factory=list)

    # Internal state
    _assigned: Set[str] = field(default_factory=set, init=False)
    _groups: List[TopicGroup] = field(default_factory=list, init=False)
    _ungrouped: List[UngroupedQuestion] = field(default_factory=list, init=False)

    def run(self) -> GroupingResult:
        """Execute grouping and build the result."""
        start = time.perf_counter()

        questions = self._dedupe(self.candidates)

        if self.options.preserve_existing_groups:
            for existing in self.existing_groups:
                self._extend_existing(existing, questions)

        remaining = [q for q in questions if q.id not in self._assigned]
        for topic, members in self._partition_by_topic(remaining).items():
            self._group_topic(topic, members)

        elapsed_ms = (time.perf_counter() - start) * 1000
        result = GroupingResult(
            groups=tuple(self._groups),
            ungrouped=tuple(self._ungrouped),
            processing_time_ms=elapsed_ms,
        )
        logger.debug(
            f"Grouped {result.grouped_question_count}/{len(questions)} questions into "
            f"{result.total_groups} groups ({len(result.ungrouped)} ungrouped)"
        )
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Steps
    # ─────────────────────────────────────────────────────────────────────────

    def _dedupe(self, questions: List[Question]) -> List[Question]:
        seen: Set[str] = set()
        unique = []
        for q in questions:
            if q.id not in seen:
                seen.add(q.id)
                unique.append(q)
        if len(unique) != len(questions):
            logger.warning(f"Ignored {len(questions) - len(unique)} duplicate question ids")
        return unique

    def _extend_existing(self, existing: ExistingGroup, questions: List[Question]) -> None:
        scored: List[Tuple[Question, float]] = []
        for q in questions:
            if q.id in self._assigned or q.effective_topic != existing.topic_category:
                continue
            score = existing_group_compatibility(q, existing, estimate_duration(q))
            if score >= self.options.min_compatibility_score:
                scored.append((q, score))

        if not scored:
            return

        scored.sort(key=lambda item: -item[0].priority_weight)
        members = scored[: self.options.max_group_size]
        grouped = tuple(GroupedQuestion(q, s, estimate_duration(q)) for q, s in members)
        member_questions = [q for q, _ in members]
        matrix = similarity_matrix(member_questions)

        group = TopicGroup(
            group_id=existing.group_id,
            group_name=existing.group_name,
            topic_category=existing.topic_category,
            questions=grouped,
            average_compatibility=_pairwise_mean(matrix, list(range(len(members)))),
            priority_boost=_priority_boost(member_questions),
            is_existing=True,
        )
        self._groups.append(group)
        self._assigned.update(q.id for q, _ in members)
        logger.debug(f"Extended existing group {existing.group_id} with {len(members)} questions")

    def _partition_by_topic(self, questions: List[Question]) -> Dict[str, List[Question]]:
        buckets: Dict[str, List[Question]] = {}
        for q in questions:
            buckets.setdefault(q.effective_topic, []).append(q)
        return buckets

    def _group_topic(self, topic: str, members: List[Question]) -> None:
        matrix = similarity_matrix(members)

        if self.options.use_semantic_similarity:
            clusters = self._cluster(matrix)
        else:
            clusters = [list(range(len(members)))]

        chunks: List[List[int]] = []
        for cluster in clusters:
            if self.options.use_semantic_similarity and len(cluster) < 2:
                q = members[cluster[0]]
                self._ungrouped.append(UngroupedQuestion(q, UNGROUPED_REASON))
                continue
            chunks.extend(self._split(cluster, members))

        for i, chunk in enumerate(chunks):
            name = _display_name(topic)
            if len(chunks) > 1:
                name = f"{name} - Group {i + 1}"
            group = self._build_group(f"new-{topic}-{i}", name, topic, chunk, members, matrix)
            self._groups.append(group)
            self._assigned.update(members[j].id for j in chunk)

    def _cluster(self, matrix: np.ndarray) -> List[List[int]]:
        """Greedy clustering: each unclustered seed absorbs everything similar to it."""
        threshold = self.options.min_compatibility_score
        n = matrix.shape[0]
        clustered = [False] * n
        clusters: List[List[int]] = []
        for seed in range(n):
            if clustered[seed]:
                continue
            cluster = [seed]
            clustered[seed] = True
            for j in range(seed + 1, n):
                if not clustered[j] and matrix[seed, j] >= threshold:
                    cluster.append(j)
                    clustered[j] = True
            clusters.append(cluster)
        return clusters

    def _split(self, cluster: List[int], members: List[Question]) -> List[List[int]]:
        """Order by priority and chunk to max_group_size."""
        ordered = sorted(cluster, key=lambda j: -members[j].priority_weight)
        size = self.options.max_group_size
        return [ordered[k:k + size] for k in range(0, len(ordered), size)]

    def _build_group(
        self,
        group_id: str,
        name: str,
        topic: str,
        chunk: List[int],
        members: List[Question],
        matrix: np.ndarray,
    ) -> TopicGroup:
        grouped = []
        for j in chunk:
            others = [k for k in chunk if k != j]
            score = float(np.mean(matrix[j, others])) if others else 1.0
            grouped.append(GroupedQuestion(members[j], min(1.0, score), estimate_duration(members[j])))

        return TopicGroup(
            group_id=group_id,
            group_name=name,
            topic_category=topic,
            questions=tuple(grouped),
            average_compatibility=_pairwise_mean(matrix, chunk),
            priority_boost=_priority_boost([members[j] for j in chunk]),
        )
