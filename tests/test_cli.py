"""
Tests for the command-line front end.
"""

import json

import pytest

from feedback_toolkit.cli import main


@pytest.fixture
def questions_file(tmp_path):
    path = tmp_path / "questions.json"
    path.write_text(json.dumps([
        {"id": "1", "text": "Overall satisfaction?", "priority_weight": 5, "estimated_duration_seconds": 10},
        {"id": "2", "text": "Staff friendliness?", "priority_weight": 4, "estimated_duration_seconds": 15},
        {"id": "3", "text": "Store cleanliness?", "priority_weight": 3, "estimated_duration_seconds": 20},
        {"id": "4", "text": "Wait time?", "priority_weight": 2, "estimated_duration_seconds": 25},
    ]))
    return path


class TestCli:
    """Tests for main()."""

    def test_evaluate_when_budget_fifty_then_json_selection_printed(self, questions_file, capsys):
        exit_code = main(["evaluate", str(questions_file), "--max-duration", "50"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert [q["id"] for q in output["selected_questions"]] == ["1", "2", "3"]

    def test_evaluate_when_budget_below_minimum_then_exit_two(self, questions_file, capsys):
        exit_code = main(["evaluate", str(questions_file), "--max-duration", "25"])

        assert exit_code == 2
        assert capsys.readouterr().out == ""

    def test_group_when_run_then_metadata_printed(self, questions_file, capsys):
        exit_code = main(["group", str(questions_file), "--no-semantic"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["metadata"]["total_groups"] == 1

    def test_optimal_when_run_then_profile_printed(self, questions_file, capsys):
        exit_code = main(["optimal", str(questions_file), "--max-call-duration", "60"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["max_questions_per_call"] == 3

    def test_strategies_when_run_then_four_listed(self, capsys):
        assert main(["strategies"]) == 0

        assert len(json.loads(capsys.readouterr().out)) == 4

    def test_evaluate_when_file_missing_then_exit_one(self, tmp_path):
        assert main(["evaluate", str(tmp_path / "missing.json")]) == 1

    def test_group_when_existing_groups_file_malformed_then_exit_two(self, questions_file, tmp_path, capsys):
        groups_file = tmp_path / "groups.json"
        groups_file.write_text("[{broken")

        exit_code = main(["group", str(questions_file), "--existing-groups", str(groups_file)])

        assert exit_code == 2
        assert capsys.readouterr().out == ""

    def test_group_when_existing_group_not_object_then_exit_two(self, questions_file, tmp_path):
        groups_file = tmp_path / "groups.json"
        groups_file.write_text(json.dumps(["service"]))

        exit_code = main(["group", str(questions_file), "--existing-groups", str(groups_file)])

        assert exit_code == 2

    def test_group_when_existing_groups_valid_then_extended(self, tmp_path, capsys):
        # Arrange
        questions_file = tmp_path / "questions.json"
        questions_file.write_text(json.dumps([
            {"id": "a", "text": "Staff", "priority_weight": 4, "category": "service",
             "estimated_duration_seconds": 10},
        ]))
        groups_file = tmp_path / "groups.json"
        groups_file.write_text(json.dumps([
            {"group_id": "g1", "topic_category": "service", "estimated_duration_seconds": 10},
        ]))

        # Act
        exit_code = main(["group", str(questions_file), "--existing-groups", str(groups_file)])

        # Assert
        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["groups"][0]["group_id"] == "g1"
        assert output["groups"][0]["is_existing"] is True

    def test_evaluate_when_choice_not_string_then_exit_two(self, tmp_path, capsys):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps([
            {"id": "1", "text": "Pick one", "priority_weight": 3, "type": "multiple_choice",
             "details": {"choices": [1, 2]}},
        ]))

        exit_code = main(["evaluate", str(path)])

        assert exit_code == 2
        assert capsys.readouterr().out == ""

    def test_strategies_when_questions_given_then_recommendation_printed(self, questions_file, capsys):
        exit_code = main(["strategies", str(questions_file), "--preference", "speed"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["recommended"] == "greedy_priority"
        assert output["candidate_count"] == 4
        assert len(output["strategies"]) == 4
