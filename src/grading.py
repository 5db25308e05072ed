"""
Answer evaluation and percentage scoring.

Grading is total: a missing, malformed or mistyped answer is simply wrong,
and an empty exam scores 0.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, List, Sequence

from src.models import (
    DragQuestion,
    McqQuestion,
    Question,
    ShortAnswerQuestion,
    TrueFalseQuestion,
)


def _as_text(value: Any) -> str:
    # Stored indexes can come back as 2, 2.0 or "2"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def evaluate(question: Question, user_answer: Any) -> bool:
    """Return True if `user_answer` is correct for `question`."""
    if user_answer is None:
        return False

    match question:
        case McqQuestion(answer=answer):
            return _as_text(user_answer) == _as_text(answer)
        case TrueFalseQuestion(answer=answer):
            # Python truthiness: empty list/dict count as False
            return bool(user_answer) == bool(answer)
        case ShortAnswerQuestion(answer=answer):
            if not isinstance(user_answer, str):
                return False
            return user_answer.strip().casefold() == _as_text(answer).strip().casefold()
        case DragQuestion(answer=answer):
            if not _is_sequence(user_answer) or not _is_sequence(answer):
                return False
            if len(user_answer) != len(answer):
                return False
            return all(_as_text(u) == _as_text(c) for u, c in zip(user_answer, answer))
        case _:
            return False


def _answer_at(answers: Sequence[Any], idx: int) -> Any:
    return answers[idx] if idx < len(answers) else None


def grade(questions: Sequence[Question], answers: Sequence[Any]) -> List[bool]:
    """Per-position correctness, aligned to `questions`."""
    return [evaluate(q, _answer_at(answers, i)) for i, q in enumerate(questions)]


def score(questions: Sequence[Question], answers: Sequence[Any]) -> int:
    """Percentage of correct answers, 0-100, rounded half up. 0 for no questions."""
    total = len(questions)
    if total == 0:
        return 0
    correct = sum(grade(questions, answers))
    pct = Decimal(correct * 100) / Decimal(total)
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
