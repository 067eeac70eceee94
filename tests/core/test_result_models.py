"""
Unit tests for EvaluationResult and grouping result models.
"""

import pytest

from feedback_toolkit.core.models import (
    EvaluationResult,
    GroupedQuestion,
    GroupingResult,
    SelectedQuestion,
    TopicGroup,
    UngroupedQuestion,
    priority_distribution,
)
from feedback_toolkit.engine.selection import SelectionAlgorithm


class TestEvaluationResult:
    """Tests for EvaluationResult invariants and derived values."""

    def test_result_when_empty_then_all_tiers_zero(self):
        result = EvaluationResult((), (), 90.0, SelectionAlgorithm.GREEDY_PRIORITY)

        assert result.selected_questions == ()
        assert result.estimated_duration_seconds == 0
        assert result.priority_distribution == {
            "critical": 0, "high": 0, "medium": 0, "low": 0, "optional": 0,
        }
        assert result.time_utilization == 0.0

    def test_result_when_duplicate_selection_then_raises(self, make_question):
        q = make_question("q1")
        with pytest.raises(ValueError, match="Duplicate"):
            EvaluationResult(
                (SelectedQuestion(q, 10), SelectedQuestion(q, 10)),
                (),
                90.0,
                SelectionAlgorithm.GREEDY_PRIORITY,
            )

    def test_result_when_selected_also_excluded_then_raises(self, make_question):
        q = make_question("q1")
        with pytest.raises(ValueError, match="both selected and excluded"):
            EvaluationResult((SelectedQuestion(q, 10),), ("q1",), 90.0, SelectionAlgorithm.GREEDY_PRIORITY)

    def test_result_when_requested_algorithm_omitted_then_matches_algorithm(self):
        result = EvaluationResult((), (), 90.0, SelectionAlgorithm.TIME_BALANCED)

        assert result.requested_algorithm == SelectionAlgorithm.TIME_BALANCED
        assert not result.capacity_guard_triggered

    def test_result_when_half_budget_used_then_utilization_half(self, make_question):
        result = EvaluationResult(
            (SelectedQuestion(make_question("q1", priority=5), 45),),
            (),
            90.0,
            SelectionAlgorithm.GREEDY_PRIORITY,
        )

        assert result.time_utilization == pytest.approx(0.5)
        assert result.priority_distribution["critical"] == 1
        assert result.get_selection("q1").estimated_duration == 45


class TestPriorityDistribution:
    """Tests for tier counting."""

    def test_distribution_when_mixed_weights_then_counted_per_tier(self):
        dist = priority_distribution([5, 5, 4, 1])

        assert dist == {"critical": 2, "high": 1, "medium": 0, "low": 0, "optional": 1}

    def test_distribution_when_weight_invalid_then_raises(self):
        with pytest.raises(ValueError):
            priority_distribution([7])


class TestGroupingModels:
    """Tests for group invariants and summary metadata."""

    def test_group_when_boost_below_one_then_raises(self, make_question):
        with pytest.raises(ValueError, match="priority_boost"):
            TopicGroup("g", "G", "t", (GroupedQuestion(make_question("a"), 1.0, 10),), 1.0, 0.5)

    def test_grouped_question_when_score_above_one_then_raises(self, make_question):
        with pytest.raises(ValueError, match="compatibility_score"):
            GroupedQuestion(make_question("a"), 1.2, 10)

    def test_grouping_result_when_question_repeated_then_raises(self, make_question):
        q = make_question("a")
        group = TopicGroup("g", "G", "t", (GroupedQuestion(q, 1.0, 10),), 1.0, 1.0)
        with pytest.raises(ValueError, match="more than once"):
            GroupingResult((group,), (UngroupedQuestion(q, "why"),))

    def test_grouping_result_when_no_groups_then_zero_metadata(self, make_question):
        result = GroupingResult((), (UngroupedQuestion(make_question("a"), "why"),))

        assert result.total_groups == 0
        assert result.average_group_size == 0.0
        assert result.grouping_confidence == 0.0

    def test_group_when_members_then_total_duration_summed(self, make_question):
        group = TopicGroup(
            "g", "G", "t",
            (GroupedQuestion(make_question("a"), 0.9, 12), GroupedQuestion(make_question("b"), 0.8, 8)),
            0.85,
            1.0,
        )

        assert group.total_duration == 20
        assert group.question_ids == ("a", "b")
