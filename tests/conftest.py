import sys
from pathlib import Path

import pytest

# Add src to sys.path so we can import feedback_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from feedback_toolkit.core.models import Question  # noqa: E402


def _make_question(
    qid: str,
    priority: int = 3,
    duration: float | None = 10.0,
    *,
    tokens: int | None = None,
    category: str | None = None,
    topic: str | None = None,
    keywords: tuple[str, ...] = (),
    text: str | None = None,
    **kwargs,
) -> Question:
    return Question(
        id=qid,
        text=text if text is not None else f"Question {qid}",
        priority_weight=priority,
        estimated_duration_seconds=duration,
        estimated_tokens=tokens,
        category=category,
        topic_category=topic,
        keywords=frozenset(keywords),
        **kwargs,
    )


# Common test fixtures
@pytest.fixture
def make_question():
    """Factory for test questions."""
    return _make_question


@pytest.fixture
def scenario_questions() -> list[Question]:
    """Five questions with descending priority and ascending duration."""
    return [
        _make_question("1", priority=5, duration=10),
        _make_question("2", priority=4, duration=15),
        _make_question("3", priority=3, duration=20),
        _make_question("4", priority=2, duration=25),
        _make_question("5", priority=1, duration=30),
    ]


@pytest.fixture
def fixed_clock():
    """Clock that advances by a set step on every call."""

    class SteppingClock:
        def __init__(self, step: float = 0.0):
            self.now = 0.0
            self.step = step

        def __call__(self) -> float:
            current = self.now
            self.now += self.step
            return current

    return SteppingClock
