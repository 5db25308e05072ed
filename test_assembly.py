"""Exam assembly: fixed, random and all-question selection, and review reconstruction."""
import random

import pytest

from src.assembly import (
    MODE_ALL,
    MODE_FIXED,
    MODE_RANDOM,
    display_options,
    exam_record,
    resolve_questions,
    review_questions,
    selection_mode,
)
from src.models import Attempt, DragQuestion, Exam, McqQuestion, ShortAnswerQuestion


def pool_of(n):
    return [ShortAnswerQuestion(id=f"q{i}", text=f"Q{i}", answer=str(i)) for i in range(n)]


def ids(questions):
    return [q.id if q else None for q in questions]


def test_selection_mode():
    assert selection_mode(Exam(id="e", question_ids=["a"], random_count=3)) == MODE_FIXED
    assert selection_mode(Exam(id="e", random_count=3)) == MODE_RANDOM
    assert selection_mode(Exam(id="e", random_count=0)) == MODE_ALL
    assert selection_mode(Exam(id="e")) == MODE_ALL


def test_fixed_mode_keeps_listed_order_and_drops_missing():
    pool = [ShortAnswerQuestion(id="y", text="Y", answer="y")]
    exam = Exam(id="e", question_ids=["x", "y", "z"])
    assert ids(resolve_questions(exam, pool)) == ["y"]


def test_fixed_mode_follows_listed_order_not_pool_order():
    exam = Exam(id="e", question_ids=["q3", "q0", "q2"])
    assert ids(resolve_questions(exam, pool_of(5))) == ["q3", "q0", "q2"]


def test_all_mode_returns_pool_in_order():
    pool = pool_of(4)
    resolved = resolve_questions(Exam(id="e"), pool)
    assert ids(resolved) == ids(pool)
    assert resolved is not pool


def test_random_mode_takes_requested_count():
    pool = pool_of(10)
    resolved = resolve_questions(Exam(id="e", random_count=4), pool, rng=random.Random(1))
    assert len(resolved) == 4
    assert len(set(ids(resolved))) == 4
    assert set(ids(resolved)) <= set(ids(pool))


def test_random_mode_with_large_count_is_a_permutation():
    pool = pool_of(6)
    exam = Exam(id="e", random_count=50)
    rng = random.Random(7)
    for _ in range(200):
        resolved = resolve_questions(exam, pool, rng=rng)
        assert len(resolved) == len(pool)
        assert set(ids(resolved)) == set(ids(pool))


def test_random_mode_does_not_modify_pool():
    pool = pool_of(5)
    before = ids(pool)
    resolve_questions(Exam(id="e", random_count=3), pool, rng=random.Random(3))
    assert ids(pool) == before


def test_seeded_random_draw_is_reproducible():
    pool = pool_of(20)
    exam = Exam(id="e", random_count=5)
    first = resolve_questions(exam, pool, rng=random.Random(42))
    second = resolve_questions(exam, pool, rng=random.Random(42))
    assert ids(first) == ids(second)


def test_review_uses_saved_question_order():
    pool = pool_of(6)
    attempt = Attempt(user_id="u", exam_id="e", answers=["4", "1"], score=100, timestamp="", question_ids=["q4", "q1"])
    questions, exact = review_questions(attempt, Exam(id="e", random_count=2), pool)
    assert exact is True
    assert ids(questions) == ["q4", "q1"]


def test_review_keeps_position_of_deleted_question():
    pool = pool_of(3)
    attempt = Attempt(user_id="u", exam_id="e", answers=["0", "9", "2"], score=67, timestamp="", question_ids=["q0", "gone", "q2"])
    questions, exact = review_questions(attempt, None, pool)
    assert exact is True
    assert ids(questions) == ["q0", None, "q2"]


def test_review_of_legacy_fixed_attempt_re_resolves():
    attempt = Attempt(user_id="u", exam_id="e", answers=[], score=0, timestamp="")
    questions, exact = review_questions(attempt, Exam(id="e", question_ids=["q2", "q1"]), pool_of(3))
    assert exact is True
    assert ids(questions) == ["q2", "q1"]


def test_review_of_legacy_random_attempt_is_flagged_inexact():
    attempt = Attempt(user_id="u", exam_id="e", answers=[], score=0, timestamp="")
    questions, exact = review_questions(attempt, Exam(id="e", random_count=2), pool_of(5))
    assert exact is False
    assert ids(questions) == ["q0", "q1"]


def test_review_without_exam_or_ids_is_empty():
    attempt = Attempt(user_id="u", exam_id="gone", answers=["x"], score=0, timestamp="")
    assert review_questions(attempt, None, pool_of(2)) == ([], False)


def test_exam_record_keeps_one_mode_active():
    assert exam_record("T", "D", MODE_FIXED, ["a", "b"], 5) == {
        "title": "T", "description": "D", "question_ids": ["a", "b"], "random_count": None,
    }
    assert exam_record("T", "D", MODE_RANDOM, ["a"], 3) == {
        "title": "T", "description": "D", "question_ids": [], "random_count": 3,
    }
    assert exam_record("T", "D", MODE_ALL, ["a"], 3) == {
        "title": "T", "description": "D", "question_ids": [], "random_count": None,
    }


def test_exam_record_rejects_empty_selection():
    with pytest.raises(ValueError, match="at least one question"):
        exam_record("T", "D", MODE_FIXED, [], None)
    with pytest.raises(ValueError, match="question count"):
        exam_record("T", "D", MODE_RANDOM, [], None)
    with pytest.raises(ValueError):
        exam_record("T", "D", MODE_RANDOM, [], 0)


def test_drag_options_are_not_shown_in_answer_order():
    items = ["one", "two", "three"]
    q = DragQuestion(id="q-drag", text="Order", options=list(items), answer=list(items))
    shown = display_options(q)
    assert shown != items
    assert sorted(shown) == sorted(items)
    assert display_options(q) == shown
    assert q.options == items


def test_two_item_drag_is_still_shuffled():
    q = DragQuestion(id="d2", text="Order", options=["a", "b"], answer=["a", "b"])
    assert display_options(q) == ["b", "a"]


def test_other_question_options_keep_stored_order():
    q = McqQuestion(id="m", text="?", options=["a", "b", "c"], answer=0)
    assert display_options(q) == ["a", "b", "c"]
