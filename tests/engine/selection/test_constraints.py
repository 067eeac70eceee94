"""
Unit tests for selection constraints and algorithm parsing.
"""

import pytest

from feedback_toolkit.core.schemas.validator import ValidationError
from feedback_toolkit.engine.selection import Constraints, SelectionAlgorithm, available_strategies


class TestConstraints:
    """Tests for Constraints validation."""

    def test_constraints_when_defaults_then_ninety_seconds_threshold_two(self):
        c = Constraints()

        assert c.max_duration_seconds == 90
        assert c.priority_threshold == 2
        assert c.algorithm == SelectionAlgorithm.GREEDY_PRIORITY

    def test_constraints_when_duration_below_minimum_then_raises(self):
        with pytest.raises(ValidationError, match="max_duration_seconds"):
            Constraints(max_duration_seconds=25)

    def test_constraints_when_duration_exactly_minimum_then_accepted(self):
        assert Constraints(max_duration_seconds=30).max_duration_seconds == 30

    @pytest.mark.parametrize("threshold", [0, 6])
    def test_constraints_when_threshold_out_of_range_then_raises(self, threshold):
        with pytest.raises(ValidationError, match="priority_threshold"):
            Constraints(priority_threshold=threshold)

    def test_constraints_when_algorithm_name_string_then_parsed(self):
        c = Constraints(algorithm="time_balanced")

        assert c.algorithm == SelectionAlgorithm.TIME_BALANCED

    def test_constraints_when_unknown_algorithm_then_raises(self):
        with pytest.raises(ValidationError, match="Unknown selection algorithm"):
            Constraints(algorithm="simulated_annealing")

    def test_from_dict_when_partial_then_defaults_filled(self):
        c = Constraints.from_dict({"max_duration_seconds": 60, "algorithm": "dynamic_programming"})

        assert c.max_duration_seconds == 60
        assert c.priority_threshold == 2
        assert c.algorithm == SelectionAlgorithm.DYNAMIC_PROGRAMMING

    def test_from_dict_when_below_minimum_then_raises(self):
        with pytest.raises(ValidationError):
            Constraints.from_dict({"max_duration_seconds": 25})

    def test_to_dict_when_round_tripped_then_equal(self):
        c = Constraints(max_duration_seconds=45, priority_threshold=3, algorithm="token_estimation")

        assert Constraints.from_dict(c.to_dict()) == c


class TestAvailableStrategies:
    """Tests for strategy descriptions."""

    def test_strategies_when_listed_then_every_algorithm_described(self):
        strategies = available_strategies()

        assert [s["name"] for s in strategies] == [a.value for a in SelectionAlgorithm]
        assert all(s["description"] and s["complexity"] for s in strategies)
