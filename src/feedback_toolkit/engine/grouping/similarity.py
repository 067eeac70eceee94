"""
Module: engine.grouping.similarity

Purpose:
    Pairwise question similarity and compatibility with existing groups.
    All scores are in [0, 1].

Key Functions:
    - question_similarity(): Similarity of two questions
    - similarity_matrix(): Symmetric n x n matrix with unit diagonal
    - existing_group_compatibility(): Fit of a question to an existing group

Scoring:
    similarity = 0.3 * same category
               + 0.2 * same topic
               + 0.3 * keyword Jaccard
               + 0.2 * significant-word overlap
    capped at 1.0. Significant words are lower-cased whitespace tokens of
    at least four characters, punctuation included.

Dependencies:
    - numpy: Similarity matrix
    - common.thresholds: Weights
"""

from __future__ import annotations

from typing import AbstractSet, FrozenSet, Sequence

import numpy as np

from feedback_toolkit.common.thresholds import GROUPING_THRESHOLDS, GroupingThresholds
from feedback_toolkit.core.models.grouping import ExistingGroup
from feedback_toolkit.core.models.questions import Question


def significant_words(
    text: str,
    thresholds: GroupingThresholds = GROUPING_THRESHOLDS,
) -> FrozenSet[str]:
    """Lower-cased words long enough to carry topic meaning."""
    min_length = thresholds.min_significant_word_length
    return frozenset(w for w in text.lower().split() if len(w) >= min_length)


def jaccard(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    """Intersection over union; 0 when both sets are empty."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def _keyword_set(question: Question) -> FrozenSet[str]:
    return frozenset(k.lower() for k in question.keywords)


def question_similarity(
    a: Question,
    b: Question,
    thresholds: GroupingThresholds = GROUPING_THRESHOLDS,
) -> float:
    """
    Similarity of two questions in [0, 1].

    Example:
        >>> question_similarity(q, q)
        1.0
    """
    if a is b:
        return 1.0
    score = 0.0
    if a.effective_category == b.effective_category:
        score += thresholds.same_category_weight
    if a.effective_topic == b.effective_topic:
        score += thresholds.same_topic_weight
    score += thresholds.keyword_overlap_weight * jaccard(_keyword_set(a), _keyword_set(b))
    score += thresholds.word_overlap_weight * jaccard(
        significant_words(a.text, thresholds), significant_words(b.text, thresholds)
    )
    return min(1.0, score)


def similarity_matrix(
    questions: Sequence[Question],
    thresholds: GroupingThresholds = GROUPING_THRESHOLDS,
) -> np.ndarray:
    """
    Pairwise similarity for ``questions``.

    Returns:
        Symmetric float array of shape (n, n) with 1.0 on the diagonal.
    """
    n = len(questions)
    matrix = np.eye(n, dtype=float)
    if n < 2:
        return matrix

    categories = np.array([q.effective_category for q in questions], dtype=object)
    topics = np.array([q.effective_topic for q in questions], dtype=object)
    base = (
        thresholds.same_category_weight * (categories[:, None] == categories[None, :])
        + thresholds.same_topic_weight * (topics[:, None] == topics[None, :])
    ).astype(float)

    keywords = [_keyword_set(q) for q in questions]
    words = [significant_words(q.text, thresholds) for q in questions]

    for i in range(n):
        for j in range(i + 1, n):
            score = (
                base[i, j]
                + thresholds.keyword_overlap_weight * jaccard(keywords[i], keywords[j])
                + thresholds.word_overlap_weight * jaccard(words[i], words[j])
            )
            matrix[i, j] = matrix[j, i] = min(1.0, score)

    return matrix


def existing_group_compatibility(
    question: Question,
    group: ExistingGroup,
    duration: float,
    thresholds: GroupingThresholds = GROUPING_THRESHOLDS,
) -> float:
    """
    How well a question fits an existing group, in [0, 1].

    Scores 0.4 for a topic match, 0.3 when the question's category equals
    the group topic, and 0.3 times the ratio of the shorter to the longer
    of the question duration and the group's historical duration.
    """
    score = 0.0
    if question.effective_topic == group.topic_category:
        score += thresholds.existing_topic_match_weight
    if question.category == group.topic_category:
        score += thresholds.existing_category_match_weight

    longest = max(duration, group.estimated_duration_seconds)
    ratio = 1.0 if longest <= 0 else min(duration, group.estimated_duration_seconds) / longest
    score += thresholds.existing_duration_weight * ratio

    return min(1.0, score)
