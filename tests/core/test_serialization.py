"""
Unit tests for JSON serialization helpers.
"""

import json

import pytest

from feedback_toolkit.core.models import ChoiceDetails, QuestionType
from feedback_toolkit.core.schemas.validator import ValidationError
from feedback_toolkit.core.utils.serialization import (
    evaluation_result_to_dict,
    existing_group_from_dict,
    grouping_result_to_dict,
    load_existing_groups_json,
    load_questions_json,
    question_from_dict,
    question_to_dict,
)
from feedback_toolkit.engine.grouping import group_questions
from feedback_toolkit.engine.controller import QuestionEvaluationService
from feedback_toolkit.engine.selection import Constraints, select_questions


class TestQuestionFromDict:
    """Tests for question deserialization."""

    def test_question_when_choice_type_then_details_parsed(self):
        # Arrange
        data = {
            "id": "q1",
            "text": "Which did you use?",
            "priority_weight": 4,
            "type": "multiple_choice",
            "details": {"choices": ["Web", "Phone"]},
            "keywords": ["channel"],
        }

        # Act
        q = question_from_dict(data)

        # Assert
        assert q.type == QuestionType.MULTIPLE_CHOICE
        assert q.details == ChoiceDetails(("Web", "Phone"))
        assert q.keywords == frozenset({"channel"})

    def test_question_when_scale_bounds_invalid_then_raises(self):
        data = {
            "id": "q1",
            "text": "Score?",
            "priority_weight": 3,
            "type": "scale",
            "details": {"min_value": 5, "max_value": 1},
        }
        with pytest.raises(ValidationError):
            question_from_dict(data)

    def test_question_when_serialized_then_keywords_sorted(self, make_question):
        q = make_question("q1", keywords=("b", "a"))

        data = question_to_dict(q)

        assert data["keywords"] == ["a", "b"]
        assert question_from_dict(data) == q

    def test_existing_group_when_topic_missing_then_raises(self):
        with pytest.raises(ValidationError, match="missing field"):
            existing_group_from_dict({"group_id": "g1"})

    def test_existing_group_when_name_missing_then_defaults_to_id(self):
        group = existing_group_from_dict({"group_id": "g1", "topic_category": "service"})

        assert group.group_name == "g1"
        assert group.estimated_duration_seconds == 30.0

    def test_existing_group_when_not_object_then_raises(self):
        with pytest.raises(ValidationError, match="must be an object"):
            existing_group_from_dict(["g1"])


class TestLoadExistingGroupsJson:
    """Tests for existing-group file loading."""

    def test_load_groups_when_valid_then_all_groups(self, tmp_path):
        path = tmp_path / "groups.json"
        path.write_text(json.dumps([
            {"group_id": "g1", "topic_category": "service"},
            {"group_id": "g2", "topic_category": "pricing", "estimated_duration_seconds": 12},
        ]))

        groups = load_existing_groups_json(path)

        assert [g.group_id for g in groups] == ["g1", "g2"]
        assert groups[1].estimated_duration_seconds == 12

    def test_load_groups_when_invalid_json_then_raises(self, tmp_path):
        path = tmp_path / "groups.json"
        path.write_text("[{broken")

        with pytest.raises(ValidationError, match="Invalid JSON"):
            load_existing_groups_json(path)

    def test_load_groups_when_top_level_object_then_raises(self, tmp_path):
        path = tmp_path / "groups.json"
        path.write_text(json.dumps({"group_id": "g1"}))

        with pytest.raises(ValidationError, match="list of groups"):
            load_existing_groups_json(path)


class TestLoadQuestionsJson:
    """Tests for file loading."""

    def test_load_when_json_array_then_all_questions(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps([
            {"id": "a", "text": "A?", "priority_weight": 3},
            {"id": "b", "text": "B?", "priority_weight": 4},
        ]))

        questions = load_questions_json(path)

        assert [q.id for q in questions] == ["a", "b"]

    def test_load_when_jsonl_then_blank_lines_skipped(self, tmp_path):
        path = tmp_path / "questions.jsonl"
        path.write_text(
            '{"id": "a", "text": "A?", "priority_weight": 3}\n\n'
            '{"id": "b", "text": "B?", "priority_weight": 2}\n'
        )

        assert len(load_questions_json(path)) == 2

    def test_load_when_wrapped_in_object_then_questions_key_used(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text(json.dumps({"questions": [{"id": "a", "text": "A?", "priority_weight": 3}]}))

        assert len(load_questions_json(path)) == 1

    def test_load_when_invalid_json_then_raises(self, tmp_path):
        path = tmp_path / "questions.json"
        path.write_text("[{")

        with pytest.raises(ValidationError, match="Invalid JSON"):
            load_questions_json(path)


class TestResultSerialization:
    """Tests for result serialization."""

    def test_evaluation_result_when_serialized_then_json_ready(self, scenario_questions):
        result = select_questions(
            scenario_questions, Constraints(max_duration_seconds=50, priority_threshold=1)
        )

        data = evaluation_result_to_dict(result)

        assert [q["id"] for q in data["selected_questions"]] == ["1", "2", "3"]
        assert data["algorithm"] == "greedy_priority"
        assert set(data["priority_distribution"]) == {"critical", "high", "medium", "low", "optional"}
        json.dumps(data)

    def test_evaluation_result_when_trigger_logs_present_then_serialized(self, scenario_questions):
        # Arrange
        logs = ({"question_id": "1", "trigger": "low_rating"},)
        result = QuestionEvaluationService().evaluate(
            scenario_questions, Constraints(max_duration_seconds=50), trigger_logs=logs
        )

        # Act
        data = evaluation_result_to_dict(result)

        # Assert
        assert data["trigger_logs"] == [{"question_id": "1", "trigger": "low_rating"}]
        assert data["capacity_guard_triggered"] is False
        assert data["selected_questions"][0]["confidence"] == pytest.approx(0.7)
        assert data["average_confidence"] == pytest.approx(0.7)
        json.dumps(data)

    def test_grouping_result_when_serialized_then_metadata_included(self, make_question):
        questions = [
            make_question("a", category="service", keywords=("staff",), text="Staff were friendly today"),
            make_question("b", category="service", keywords=("staff",), text="Staff were friendly today"),
        ]

        data = grouping_result_to_dict(group_questions(questions))

        assert data["metadata"]["total_groups"] == 1
        assert data["metadata"]["average_group_size"] == 2.0
        json.dumps(data)
