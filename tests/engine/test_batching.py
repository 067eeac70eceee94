"""
Unit tests for bounded batch fan-out.
"""

import threading

import pytest

from feedback_toolkit.engine.batching import run_in_batches


class TestRunInBatches:
    """Tests for run_in_batches()."""

    def test_batches_when_all_succeed_then_values_in_input_order(self):
        report = run_in_batches(list(range(25)), lambda x: x * 2, batch_size=10)

        assert report.values == [x * 2 for x in range(25)]
        assert report.failed == []

    def test_batches_when_item_fails_then_others_still_complete(self):
        # Arrange
        def invert(x):
            return 10 // x

        # Act
        report = run_in_batches([1, 2, 0, 5], invert, batch_size=2)

        # Assert
        assert report.values == [10, 5, 2]
        assert len(report.failed) == 1
        failure = report.failed[0]
        assert failure.index == 2
        assert isinstance(failure.error, ZeroDivisionError)

    def test_batches_when_running_then_in_flight_bounded_by_batch_size(self):
        lock = threading.Lock()
        state = {"active": 0, "peak": 0}

        def track(x):
            with lock:
                state["active"] += 1
                state["peak"] = max(state["peak"], state["active"])
            with lock:
                state["active"] -= 1
            return x

        run_in_batches(list(range(30)), track, batch_size=3)

        assert state["peak"] <= 3

    def test_batches_when_empty_then_empty_report(self):
        report = run_in_batches([], lambda x: x)

        assert len(report) == 0

    def test_batches_when_batch_size_zero_then_raises(self):
        with pytest.raises(ValueError):
            run_in_batches([1], lambda x: x, batch_size=0)
