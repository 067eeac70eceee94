"""
JSON Serialization Utilities

Converts questions, groups and results to and from plain dicts, and
loads question files in JSON array or JSON Lines form.

Deserializers validate raw payloads first so a bad file reports every
problem with the offending question, not a bare TypeError.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

from feedback_toolkit.core.models.evaluation import EvaluationResult
from feedback_toolkit.core.models.grouping import (
    ExistingGroup,
    GroupingResult,
    OptimalGrouping,
    TopicGroup,
)
from feedback_toolkit.core.models.questions import (
    ChoiceDetails,
    Question,
    QuestionDetails,
    QuestionType,
    RatingDetails,
    ScaleDetails,
    TextDetails,
)
from feedback_toolkit.core.schemas.validator import ValidationError, validate_question_dict

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Questions
# ─────────────────────────────────────────────────────────────────────────────

def _deserialize_details(qtype: QuestionType, data: Any) -> QuestionDetails | None:
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise ValidationError(f"'details' must be an object for {qtype.value}", field="details")
    try:
        if qtype == QuestionType.TEXT:
            return TextDetails(max_length=data.get("max_length"))
        if qtype == QuestionType.RATING:
            return RatingDetails(scale=data.get("scale", 5))
        if qtype in (QuestionType.MULTIPLE_CHOICE, QuestionType.CHECKBOX):
            return ChoiceDetails(choices=tuple(data.get("choices", ())))
        if qtype == QuestionType.SCALE:
            return ScaleDetails(
                min_value=data.get("min_value", 1),
                max_value=data.get("max_value", 10),
            )
    except TypeError as e:
        raise ValidationError(f"Invalid details for {qtype.value}: {e}", field="details") from e
    raise ValidationError(f"{qtype.value} questions take no details", field="details")


def _serialize_details(details: QuestionDetails | None) -> Dict[str, Any] | None:
    if details is None:
        return None
    if isinstance(details, TextDetails):
        return {"max_length": details.max_length}
    if isinstance(details, RatingDetails):
        return {"scale": details.scale}
    if isinstance(details, ChoiceDetails):
        return {"choices": list(details.choices)}
    return {"min_value": details.min_value, "max_value": details.max_value}


def question_from_dict(data: Mapping[str, Any]) -> Question:
    """
    Build a Question from a raw dict.

    Raises:
        ValidationError: If the payload is malformed or out of range
    """
    validate_question_dict(data)
    qtype = QuestionType.from_name(data.get("type", "text"))
    return Question(
        id=data["id"],
        text=data["text"],
        priority_weight=data["priority_weight"],
        estimated_duration_seconds=data.get("estimated_duration_seconds"),
        estimated_tokens=data.get("estimated_tokens"),
        topic_category=data.get("topic_category"),
        category=data.get("category"),
        keywords=frozenset(data.get("keywords") or ()),
        type=qtype,
        details=_deserialize_details(qtype, data.get("details")),
        trigger_reasons=tuple(data.get("trigger_reasons") or ()),
        historical_duration_seconds=data.get("historical_duration_seconds"),
    )


def question_to_dict(question: Question) -> Dict[str, Any]:
    """Serialize a Question; keywords are sorted for stable output."""
    return {
        "id": question.id,
        "text": question.text,
        "priority_weight": question.priority_weight,
        "estimated_duration_seconds": question.estimated_duration_seconds,
        "estimated_tokens": question.estimated_tokens,
        "topic_category": question.topic_category,
        "category": question.category,
        "keywords": sorted(question.keywords),
        "type": question.type.value,
        "details": _serialize_details(question.details),
        "trigger_reasons": list(question.trigger_reasons),
        "historical_duration_seconds": question.historical_duration_seconds,
    }


def existing_group_from_dict(data: Mapping[str, Any]) -> ExistingGroup:
    """Build an ExistingGroup from a raw dict."""
    if not isinstance(data, Mapping):
        raise ValidationError(
            f"Existing group must be an object, got {type(data).__name__}",
            field="existing_group",
        )
    try:
        return ExistingGroup(
            group_id=data["group_id"],
            group_name=data.get("group_name", data["group_id"]),
            topic_category=data["topic_category"],
            estimated_duration_seconds=data.get("estimated_duration_seconds", 30.0),
        )
    except KeyError as e:
        raise ValidationError(f"Existing group missing field {e}", field="existing_group") from e
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid existing group: {e}", field="existing_group") from e


def load_existing_groups_json(path: Path) -> List[ExistingGroup]:
    """
    Load previously persisted groups from a JSON array file.

    Raises:
        ValidationError: If the file is not valid JSON or a group is invalid
    """
    path = Path(path)
    try:
        payloads = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {path}: {e}", field="file") from e

    if not isinstance(payloads, list):
        raise ValidationError(f"{path} must contain a list of groups", field="file")

    groups = [existing_group_from_dict(p) for p in payloads]
    logger.debug(f"Loaded {len(groups)} existing groups from {path}")
    return groups


def load_questions_json(path: Path) -> List[Question]:
    """
    Load questions from a JSON array file or a JSON Lines file.

    Raises:
        ValidationError: If the file is not valid JSON or a question is invalid
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    try:
        if path.suffix == ".jsonl":
            payloads = [json.loads(line) for line in text.splitlines() if line.strip()]
        else:
            payloads = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {path}: {e}", field="file") from e

    if isinstance(payloads, Mapping):
        payloads = payloads.get("questions", [])
    if not isinstance(payloads, list):
        raise ValidationError(f"{path} must contain a list of questions", field="file")

    questions = [question_from_dict(p) for p in payloads]
    logger.debug(f"Loaded {len(questions)} questions from {path}")
    return questions


# ─────────────────────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────────────────────

def evaluation_result_to_dict(result: EvaluationResult) -> Dict[str, Any]:
    """Serialize an EvaluationResult to a JSON-ready dict."""
    return {
        "selected_questions": [
            {
                "id": s.question.id,
                "text": s.question.text,
                "priority_weight": s.question.priority_weight,
                "estimated_duration": s.estimated_duration,
                "confidence": s.confidence,
                "selection_reason": s.selection_reason,
                "trigger_reasons": list(s.question.trigger_reasons),
            }
            for s in result.selections
        ],
        "excluded_question_ids": list(result.excluded_question_ids),
        "estimated_duration_seconds": result.estimated_duration_seconds,
        "max_duration_seconds": result.max_duration_seconds,
        "time_utilization": result.time_utilization,
        "average_confidence": result.average_confidence,
        "priority_distribution": result.priority_distribution,
        "algorithm": result.algorithm.value,
        "requested_algorithm": result.requested_algorithm.value,
        "fallback_reason": result.fallback_reason,
        "capacity_guard_triggered": result.capacity_guard_triggered,
        "questions_considered": result.questions_considered,
        "processing_time_ms": result.processing_time_ms,
        "performance_valid": result.performance_valid,
        "processing_stages": dict(result.processing_stages),
        "trigger_logs": list(result.trigger_logs),
        "warnings": list(result.warnings),
    }


def _group_to_dict(group: TopicGroup) -> Dict[str, Any]:
    return {
        "group_id": group.group_id,
        "group_name": group.group_name,
        "topic_category": group.topic_category,
        "is_existing": group.is_existing,
        "questions": [
            {
                "id": gq.question.id,
                "compatibility_score": gq.compatibility_score,
                "estimated_duration": gq.estimated_duration,
            }
            for gq in group.questions
        ],
        "total_duration": group.total_duration,
        "average_compatibility": group.average_compatibility,
        "priority_boost": group.priority_boost,
    }


def grouping_result_to_dict(result: GroupingResult) -> Dict[str, Any]:
    """Serialize a GroupingResult, including summary metadata."""
    return {
        "groups": [_group_to_dict(g) for g in result.groups],
        "ungrouped": [{"id": u.question.id, "reason": u.reason} for u in result.ungrouped],
        "metadata": {
            "total_groups": result.total_groups,
            "average_group_size": result.average_group_size,
            "grouping_confidence": result.grouping_confidence,
            "processing_time_ms": result.processing_time_ms,
        },
    }


def optimal_grouping_to_dict(result: OptimalGrouping) -> Dict[str, Any]:
    data = grouping_result_to_dict(result.grouping)
    data.update({
        "max_questions_per_call": result.max_questions_per_call,
        "estimated_coverage": result.estimated_coverage,
        "profile": {
            "max_group_size": result.profile[0],
            "min_compatibility_score": result.profile[1],
        },
        "score": result.score,
    })
    return data
