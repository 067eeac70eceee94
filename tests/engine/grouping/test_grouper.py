"""
Unit tests for topic grouping.
"""

import pytest

from feedback_toolkit.core.models import ExistingGroup
from feedback_toolkit.core.schemas.validator import ValidationError
from feedback_toolkit.engine.grouping import UNGROUPED_REASON, GroupingOptions, group_questions


def placed_ids(result):
    ids = [qid for g in result.groups for qid in g.question_ids]
    ids.extend(u.question.id for u in result.ungrouped)
    return ids


@pytest.fixture
def service_pair_and_pricing(make_question):
    return [
        make_question(
            "s1", category="service", keywords=("staff", "wait"),
            text="How satisfied were you with our staff service today",
        ),
        make_question(
            "s2", category="service", keywords=("staff", "wait"),
            text="How satisfied were you with the staff service today",
        ),
        make_question("p1", category="pricing", keywords=("price",), text="Was the price fair"),
    ]


class TestGroupQuestions:
    """Tests for new-group formation."""

    def test_group_when_similar_service_pair_then_grouped_and_pricing_left_out(
        self, service_pair_and_pricing
    ):
        # Act
        result = group_questions(service_pair_and_pricing)

        # Assert
        assert result.total_groups == 1
        group = result.groups[0]
        assert set(group.question_ids) == {"s1", "s2"}
        assert group.average_compatibility == pytest.approx(1.0)
        assert group.group_id == "new-service-0"
        assert group.group_name == "service"
        assert [u.question.id for u in result.ungrouped] == ["p1"]
        assert result.ungrouped[0].reason == UNGROUPED_REASON

    def test_group_when_no_candidates_then_empty_result(self):
        result = group_questions([])

        assert result.groups == ()
        assert result.ungrouped == ()
        assert result.grouping_confidence == 0.0

    def test_group_when_cluster_exceeds_max_size_then_split_by_priority(self, make_question):
        # Arrange
        priorities = [1, 5, 2, 4, 3, 5]
        questions = [
            make_question(f"q{i}", priority=p, category="service", keywords=("staff",), text="Staff helpful")
            for i, p in enumerate(priorities)
        ]

        # Act
        result = group_questions(questions, GroupingOptions(max_group_size=4))

        # Assert
        assert [g.size for g in result.groups] == [4, 2]
        assert result.groups[0].question_ids == ("q1", "q5", "q3", "q4")
        assert result.groups[1].question_ids == ("q2", "q0")
        assert [g.group_name for g in result.groups] == ["service - Group 1", "service - Group 2"]
        assert [g.group_id for g in result.groups] == ["new-service-0", "new-service-1"]

    def test_group_when_semantic_disabled_then_whole_topic_bucket_grouped(self, make_question):
        questions = [
            make_question("a", category="service", text="alpha"),
            make_question("b", category="service", text="omega"),
            make_question("c", category="pricing", text="cost"),
        ]

        result = group_questions(questions, GroupingOptions(use_semantic_similarity=False))

        assert [g.question_ids for g in result.groups] == [("a", "b"), ("c",)]
        assert result.ungrouped == ()
        assert result.groups[1].average_compatibility == 1.0

    def test_group_when_below_threshold_then_separate_clusters(self, make_question):
        # Same category only: similarity 0.5 < 0.6
        questions = [
            make_question("a", category="service", text="alpha"),
            make_question("b", category="service", text="omega"),
        ]

        result = group_questions(questions)

        assert result.groups == ()
        assert [u.question.id for u in result.ungrouped] == ["a", "b"]

    def test_group_when_lower_threshold_then_same_pair_grouped(self, make_question):
        questions = [
            make_question("a", category="service", text="alpha"),
            make_question("b", category="service", text="omega"),
        ]

        result = group_questions(questions, GroupingOptions(min_compatibility_score=0.5))

        assert result.groups[0].question_ids == ("a", "b")
        assert result.groups[0].questions[0].compatibility_score == pytest.approx(0.5)

    def test_group_when_topic_has_underscores_then_name_uses_spaces(self, make_question):
        questions = [
            make_question("a", topic="wait_time", keywords=("wait",), text="Waiting period acceptable"),
            make_question("b", topic="wait_time", keywords=("wait",), text="Waiting period acceptable"),
        ]

        result = group_questions(questions)

        assert result.groups[0].group_name == "wait time"
        assert result.groups[0].topic_category == "wait_time"

    def test_group_when_high_priority_members_then_boost_above_one(self, make_question):
        questions = [
            make_question("a", priority=5, category="service", keywords=("k",), text="same words here"),
            make_question("b", priority=5, category="service", keywords=("k",), text="same words here"),
        ]

        result = group_questions(questions)

        assert result.groups[0].priority_boost == pytest.approx(5 / 3)

    def test_group_when_low_priority_members_then_boost_is_one(self, make_question):
        questions = [
            make_question("a", priority=2, category="service", keywords=("k",)),
            make_question("b", priority=2, category="service", keywords=("k",)),
        ]

        result = group_questions(questions)

        assert result.groups[0].priority_boost == 1.0

    def test_group_when_group_formed_then_total_duration_is_member_sum(self, make_question):
        questions = [
            make_question("a", duration=12, category="service", keywords=("k",)),
            make_question("b", duration=8, category="service", keywords=("k",)),
        ]

        result = group_questions(questions)

        assert result.groups[0].total_duration == 20


class TestExistingGroups:
    """Tests for extending caller-supplied groups."""

    def test_existing_when_compatible_candidates_then_assigned_first(self, make_question):
        # Arrange
        existing = ExistingGroup("g-7", "Service Quality", "service", 10.0)
        questions = [
            make_question("fit", category="service", duration=10),
            make_question("slow", topic="service", category="support", duration=40),
            make_question("other", category="pricing", duration=10),
        ]

        # Act
        result = group_questions(questions, existing_groups=[existing])

        # Assert
        group = result.find_group("fit")
        assert group.group_id == "g-7"
        assert group.group_name == "Service Quality"
        assert group.is_existing
        assert group.questions[0].compatibility_score == pytest.approx(1.0)
        assert result.find_group("slow") is None
        assert sorted(placed_ids(result)) == ["fit", "other", "slow"]

    def test_existing_when_more_matches_than_capacity_then_highest_priority_taken(self, make_question):
        existing = ExistingGroup("g", "Service", "service", 10.0)
        questions = [
            make_question(f"q{p}", priority=p, category="service", duration=10)
            for p in (1, 3, 5, 2, 4)
        ]

        result = group_questions(questions, GroupingOptions(max_group_size=2), [existing])

        assert result.groups[0].question_ids == ("q5", "q4")

    def test_existing_when_members_weakly_similar_then_average_is_pairwise(self, make_question):
        # Arrange: each member scores 0.7 against the group, 0.2 against each other
        existing = ExistingGroup("g", "Service", "service", 10.0)
        questions = [
            make_question("a", topic="service", category="staff", text="alpha", duration=10),
            make_question("b", topic="service", category="speed", text="omega", duration=10),
        ]

        # Act
        result = group_questions(questions, existing_groups=[existing])

        # Assert
        group = result.groups[0]
        assert group.question_ids == ("a", "b")
        assert [gq.compatibility_score for gq in group.questions] == pytest.approx([0.7, 0.7])
        assert group.average_compatibility == pytest.approx(0.2)

    def test_existing_when_preserve_disabled_then_ignored(self, make_question):
        existing = ExistingGroup("g", "Service", "service", 10.0)
        questions = [make_question("a", category="service", duration=10)]

        result = group_questions(
            questions, GroupingOptions(preserve_existing_groups=False), [existing]
        )

        assert result.groups == ()
        assert len(result.ungrouped) == 1


class TestGroupingOptions:
    """Tests for option validation."""

    def test_options_when_group_size_zero_then_raises(self):
        with pytest.raises(ValidationError, match="max_group_size"):
            GroupingOptions(max_group_size=0)

    @pytest.mark.parametrize("score", [-0.1, 1.5])
    def test_options_when_score_out_of_range_then_raises(self, score):
        with pytest.raises(ValidationError, match="min_compatibility_score"):
            GroupingOptions(min_compatibility_score=score)

    def test_options_from_dict_when_unknown_key_then_raises(self):
        with pytest.raises(ValidationError, match="Unknown grouping option"):
            GroupingOptions.from_dict({"group_size": 3})

    def test_options_from_dict_when_valid_then_built(self):
        options = GroupingOptions.from_dict({"max_group_size": 3, "use_semantic_similarity": False})

        assert options.max_group_size == 3
        assert not options.use_semantic_similarity
