"""
Module: engine.store

Purpose:
    Interface to the question store. The evaluation service reads
    candidates and persisted groups through it; persistence itself lives
    elsewhere.

Key Classes:
    - QuestionStore: Protocol implemented by storage adapters
    - InMemoryQuestionStore: Dict-backed store for scripts and tests
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from feedback_toolkit.core.models.grouping import ExistingGroup
from feedback_toolkit.core.models.questions import Question


class QuestionStore(Protocol):
    """Read access to a business's questions and persisted groups."""

    def list_questions(self, business_id: str) -> Sequence[Question]:
        """Eligible candidate questions for a business."""
        ...

    def list_question_groups(self, business_id: str) -> Sequence[ExistingGroup]:
        """Persisted question groups for a business."""
        ...


class InMemoryQuestionStore:
    """QuestionStore backed by dicts keyed on business id."""

    def __init__(
        self,
        questions: Optional[Dict[str, Iterable[Question]]] = None,
        groups: Optional[Dict[str, Iterable[ExistingGroup]]] = None,
    ):
        self._questions: Dict[str, List[Question]] = {
            k: list(v) for k, v in (questions or {}).items()
        }
        self._groups: Dict[str, List[ExistingGroup]] = {
            k: list(v) for k, v in (groups or {}).items()
        }

    def add_questions(self, business_id: str, questions: Iterable[Question]) -> None:
        self._questions.setdefault(business_id, []).extend(questions)

    def add_groups(self, business_id: str, groups: Iterable[ExistingGroup]) -> None:
        self._groups.setdefault(business_id, []).extend(groups)

    def list_questions(self, business_id: str) -> Sequence[Question]:
        return tuple(self._questions.get(business_id, ()))

    def list_question_groups(self, business_id: str) -> Sequence[ExistingGroup]:
        return tuple(self._groups.get(business_id, ()))
