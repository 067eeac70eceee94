"""
Unit tests for grouping configuration search.
"""

import pytest

from feedback_toolkit.core.schemas.validator import ValidationError
from feedback_toolkit.engine.grouping import (
    find_optimal_grouping,
    group_questions,
    max_questions_per_call,
    score_grouping,
)


def similar_service_questions(make_question, count, duration=30):
    return [
        make_question(f"q{i}", category="service", keywords=("staff",), text="Staff were helpful", duration=duration)
        for i in range(count)
    ]


class TestFindOptimalGrouping:
    """Tests for find_optimal_grouping()."""

    def test_search_when_no_candidates_then_validation_error(self):
        with pytest.raises(ValidationError, match="No questions"):
            find_optimal_grouping([], 90)

    def test_search_when_duration_not_positive_then_validation_error(self, make_question):
        with pytest.raises(ValidationError):
            find_optimal_grouping([make_question("a")], 0)

    def test_search_when_call_fits_all_then_full_coverage(self, make_question):
        questions = similar_service_questions(make_question, 3)

        result = find_optimal_grouping(questions, 90)

        assert result.max_questions_per_call == 3
        assert result.estimated_coverage == 1.0

    def test_search_when_call_fits_some_then_partial_coverage(self, make_question):
        questions = similar_service_questions(make_question, 3)

        result = find_optimal_grouping(questions, 60)

        assert result.max_questions_per_call == 2
        assert result.estimated_coverage == pytest.approx(2 / 3)

    def test_search_when_zero_mean_duration_then_all_questions_per_call(self, make_question):
        questions = similar_service_questions(make_question, 4, duration=0)

        result = find_optimal_grouping(questions, 30)

        assert result.max_questions_per_call == 4
        assert result.estimated_coverage == 1.0

    def test_search_when_nothing_groups_then_first_profile_wins_tie(self, make_question):
        questions = [
            make_question("a", category="service", text="alpha"),
            make_question("b", category="pricing", text="omega"),
        ]

        result = find_optimal_grouping(questions, 90)

        assert result.profile == (3, 0.7)
        assert result.groups == ()

    def test_search_when_profiles_score_equally_then_first_profile_kept(self, make_question):
        # Every profile averages three questions per group here, so all score 1.0
        questions = similar_service_questions(make_question, 6)

        result = find_optimal_grouping(questions, 90)

        assert result.profile == (3, 0.7)
        assert [g.size for g in result.groups] == [3, 3]
        assert result.score == pytest.approx(0.5 + 0.3 + 0.2)


class TestScoring:
    """Tests for the composite score and per-call capacity."""

    def test_score_when_no_groups_then_only_balance_term(self, make_question):
        result = group_questions([make_question("a")])

        # coverage 0, confidence 0, balance 1 / (|0 - 3| + 1)
        assert score_grouping(result, 1) == pytest.approx(0.2 * 0.25)

    def test_max_per_call_when_mean_twenty_then_floor_division(self, make_question):
        questions = [make_question("a", duration=10), make_question("b", duration=30)]

        assert max_questions_per_call(questions, 70) == 3
