"""
Exam assembly: turn an exam definition and a question pool into the ordered
list of questions a user answers.

The resolved order is the index space of `Attempt.answers`, so it is saved on
the attempt (`question_ids`) and review screens rebuild from that instead of
re-running the selection.
"""
import logging
import random
from typing import Dict, List, Optional, Sequence, Tuple

from src.models import Attempt, Exam, Question

logger = logging.getLogger(__name__)

MODE_FIXED = "fixed"
MODE_RANDOM = "random"
MODE_ALL = "all"


def selection_mode(exam: Exam) -> str:
    """fixed if question_ids is set, random if random_count > 0, else all."""
    if exam.question_ids:
        return MODE_FIXED
    if exam.random_count and exam.random_count > 0:
        return MODE_RANDOM
    return MODE_ALL


def _index_by_id(pool: Sequence[Question]) -> Dict[str, Question]:
    return {q.id: q for q in pool}


def _pick_fixed(ids: Sequence[str], pool: Sequence[Question]) -> List[Question]:
    by_id = _index_by_id(pool)
    picked = [by_id[qid] for qid in ids if qid in by_id]
    missing = len(ids) - len(picked)
    if missing:
        logger.warning(f"{missing} of {len(ids)} listed questions not found in pool; skipped")
    return picked


def resolve_questions(
    exam: Exam,
    pool: Sequence[Question],
    rng: Optional[random.Random] = None,
) -> List[Question]:
    """
    Ordered questions for one attempt.

    Args:
        exam: Exam definition (selection mode comes from its fields)
        pool: Every available question, in storage order
        rng: Random source for random mode; pass a seeded Random to replay a draw

    Returns:
        New list; `pool` is not modified
    """
    mode = selection_mode(exam)
    if mode == MODE_FIXED:
        return _pick_fixed(exam.question_ids, pool)
    if mode == MODE_RANDOM:
        # random.shuffle is a Fisher-Yates pass: swap i with randint(0, i) from the end down
        shuffled = list(pool)
        (rng or random).shuffle(shuffled)
        return shuffled[: exam.random_count]
    return list(pool)


def review_questions(
    attempt: Attempt,
    exam: Optional[Exam],
    pool: Sequence[Question],
) -> Tuple[List[Optional[Question]], bool]:
    """
    Questions aligned with `attempt.answers` for the result screen.

    Returns (questions, exact). With saved question_ids the order is exact and a
    question deleted since submission comes back as None so positions stay put.
    Older attempts without ids are re-resolved; a random draw cannot be
    replayed, so those return the first random_count pool questions and
    exact=False.
    """
    if attempt.question_ids:
        by_id = _index_by_id(pool)
        return [by_id.get(qid) for qid in attempt.question_ids], True

    if exam is None:
        return [], False

    mode = selection_mode(exam)
    if mode == MODE_RANDOM:
        logger.warning(f"Attempt {attempt.id} has no saved question order; review is approximate")
        return list(pool)[: exam.random_count], False
    return list(resolve_questions(exam, pool)), True


def exam_record(
    title: str,
    description: str,
    mode: str,
    question_ids: Sequence[str] = (),
    random_count: Optional[int] = None,
) -> Dict:
    """
    Exam row for storage with exactly one selection mode active.
    Raises ValueError if the chosen mode has nothing to select with.
    """
    row = {"title": title, "description": description}
    if mode == MODE_FIXED:
        if not question_ids:
            raise ValueError("Pick at least one question for a fixed exam")
        row["question_ids"] = list(question_ids)
        row["random_count"] = None
    elif mode == MODE_RANDOM:
        if not random_count or int(random_count) < 1:
            raise ValueError("Random exams need a question count of at least 1")
        row["question_ids"] = []
        row["random_count"] = int(random_count)
    else:
        row["question_ids"] = []
        row["random_count"] = None
    return row


def display_options(question: Question) -> List[str]:
    """
    Options in the order shown to the user. Ordering questions store their
    options in the correct order, so they are shuffled with the question id as
    seed (stable across reruns) and never shown already solved.
    """
    options = list(question.options)
    if question.type != "drag" or len(set(options)) < 2:
        return options
    shuffled = list(options)
    random.Random(question.id).shuffle(shuffled)
    if shuffled == options:
        shuffled = shuffled[1:] + shuffled[:1]
    return shuffled
