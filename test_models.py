"""Record parsing for questions, exams, attempts and profiles, and the admin question form."""
import pytest

from engine import UNASSIGNED_CATEGORY
from src.models import (
    Attempt,
    DragQuestion,
    Exam,
    McqQuestion,
    ShortAnswerQuestion,
    TrueFalseQuestion,
    UnsupportedQuestion,
    UserSession,
    question_from_record,
    question_record_from_form,
    question_to_record,
)


def test_question_variants_from_rows(question_rows):
    kinds = [type(question_from_record(r)) for r in question_rows]
    assert kinds == [McqQuestion, TrueFalseQuestion, ShortAnswerQuestion, DragQuestion]


def test_question_row_defaults():
    q = question_from_record({"id": 7, "type": "truefalse", "text": "?", "answer": False})
    assert q.id == "7"
    assert q.options == ["True", "False"]
    assert q.category_name == UNASSIGNED_CATEGORY
    assert q.explanation == ""


def test_unknown_or_missing_type_parses_as_unsupported():
    assert isinstance(question_from_record({"id": "a", "text": "?"}), UnsupportedQuestion)
    q = question_from_record({"id": "b", "type": "essay", "text": "?", "options": "not a list"})
    assert q.type == "essay"
    assert q.options == []


def test_question_to_record_omits_options_for_short():
    row = question_to_record(ShortAnswerQuestion(id="s", text="?", answer="x"))
    assert "options" not in row
    assert row["type"] == "short"
    assert question_to_record(McqQuestion(id="m", text="?", options=["a", "b"], answer=1))["options"] == ["a", "b"]


def test_exam_from_record_tolerates_bad_count():
    exam = Exam.from_record({"id": "e1", "title": "T", "question_ids": None, "random_count": "abc"})
    assert exam.question_ids == []
    assert exam.random_count is None
    assert Exam.from_record({"id": "e2", "random_count": "5"}).random_count == 5


def test_attempt_record_round_trip_keeps_question_order():
    attempt = Attempt(user_id="u", exam_id="e", answers=[1, None], score=50, timestamp="2026-01-01T00:00:00+00:00", question_ids=["b", "a"])
    row = attempt.to_record()
    assert "id" not in row
    restored = Attempt.from_record({**row, "id": "att-1"})
    assert restored.question_ids == ["b", "a"]
    assert restored.answers == [1, None]
    assert restored.id == "att-1"


def test_legacy_attempt_without_question_ids():
    attempt = Attempt.from_record({"id": "a", "user_id": "u", "exam_id": "e", "answers": [], "score": 0})
    assert attempt.question_ids is None


def test_user_session_from_profile():
    user = UserSession.from_profile({"uid": "u1", "email": "a@b.c", "is_admin": True, "badges": None, "attempts": ["x"]})
    assert user.is_admin is True
    assert user.badges == []
    assert user.attempts == ["x"]
    assert user.display_name == "a@b.c"


def test_form_mcq_question():
    row = question_record_from_form("mcq", " Pick ", "a\n\n b \nc", 1, "", {"id": "c1", "name": "Maths"})
    assert row["text"] == "Pick"
    assert row["options"] == ["a", "b", "c"]
    assert row["answer"] == 1
    assert row["category_id"] == "c1"
    assert row["category_name"] == "Maths"


def test_form_mcq_answer_out_of_range():
    with pytest.raises(ValueError):
        question_record_from_form("mcq", "Pick", "a\nb", 5)
    with pytest.raises(ValueError):
        question_record_from_form("mcq", "Pick", "a\nb", None)


def test_form_drag_answer_is_entered_order():
    row = question_record_from_form("drag", "Sort", "first\nsecond\nthird")
    assert row["answer"] == ["first", "second", "third"]
    assert row["category_name"] == UNASSIGNED_CATEGORY


def test_form_truefalse_and_short():
    assert question_record_from_form("truefalse", "Sky is blue", answer="true")["answer"] is True
    assert question_record_from_form("truefalse", "Sky is green", answer=False)["answer"] is False
    assert question_record_from_form("short", "Capital?", answer=" Paris ")["answer"] == "Paris"
    with pytest.raises(ValueError):
        question_record_from_form("short", "Capital?", answer="  ")


def test_form_rejects_missing_text_and_unknown_type():
    with pytest.raises(ValueError):
        question_record_from_form("mcq", "   ", "a\nb", 0)
    with pytest.raises(ValueError):
        question_record_from_form("essay", "Discuss")
