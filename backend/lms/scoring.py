"""
Automatic scoring of assessment answers.

Only multiple-choice questions with an answer key are scored; text
questions are left for the facilitator. The result is stored as
``Submission.auto_grade`` and never touches the facilitator ``grade``.

Example:
    >>> questions = parse_questions([
    ...     {"id": "q1", "type": "multiple-choice", "options": ["a", "b"],
    ...      "correct_answer_index": 1, "points": 10},
    ...     {"id": "q2", "type": "text", "points": 5},
    ... ])
    >>> score(questions, {"q1": "b"})
    10
"""

from typing import Any, Iterable, List, Mapping, Sequence

from pydantic import TypeAdapter

from .exceptions import IncompleteAnswers
from .schemas import MultipleChoiceQuestion, Question

_questions_adapter = TypeAdapter(List[Question])


def parse_questions(payload: Iterable[Any]) -> List[Question]:
    """Validate a raw questions payload (JSON column) into typed questions."""
    return _questions_adapter.validate_python(list(payload))


def score(questions: Sequence[Question], answers: Mapping[str, Any]) -> int:
    """Sum the points of every correctly answered multiple-choice question."""
    total = 0
    for question in questions:
        if isinstance(question, MultipleChoiceQuestion) and question.is_correct(answers.get(question.id)):
            total += question.points
    return total


def max_auto_score(questions: Sequence[Question]) -> int:
    """Upper bound of ``score``: the points of all multiple-choice questions."""
    return sum(q.points for q in questions if isinstance(q, MultipleChoiceQuestion))


def _is_answered(answer: Any) -> bool:
    if answer is None:
        return False
    if isinstance(answer, str):
        return answer.strip() != ""
    return True


def unanswered_question_ids(questions: Sequence[Question], answers: Mapping[str, Any]) -> List[str]:
    return [q.id for q in questions if not _is_answered(answers.get(q.id))]


def validate_answers(questions: Sequence[Question], answers: Mapping[str, Any]) -> None:
    """Raise IncompleteAnswers unless every question has a non-empty answer."""
    missing = unanswered_question_ids(questions, answers)
    if missing:
        raise IncompleteAnswers(missing)
