"""
Exam session: question assembly, answer collection, scoring and badge awards
for one attempt. Pure; persistence is done by the caller (see submit_exam).
"""
import logging
import random
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from src.assembly import resolve_questions, selection_mode
from src.badges import merge_badges, new_badges
from src.grading import grade, score
from src.models import Attempt, Exam, Question, UserSession

logger = logging.getLogger(__name__)


class ExamSession:
    """One user working through one exam."""

    def __init__(
        self,
        user: UserSession,
        exam: Exam,
        question_pool: Sequence[Question],
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            user: Signed-in user taking the exam
            exam: Exam definition
            question_pool: Pre-fetched questions; a snapshot is taken in generate_questions
            rng: Random source for random-mode exams
        """
        self.user = user
        self.exam = exam
        self.question_pool = list(question_pool)
        self.rng = rng

        self.questions: List[Question] = []
        self.answers: List[Any] = []
        self.current_question_idx = 0

        self.started_at = datetime.now(timezone.utc)
        self.ended_at: Optional[datetime] = None
        self.status = "in_progress"

    def generate_questions(self) -> List[Question]:
        """Resolve the exam's questions and reset answers to unanswered."""
        self.questions = resolve_questions(self.exam, self.question_pool, rng=self.rng)
        self.answers = [None] * len(self.questions)
        self.current_question_idx = 0
        logger.info(
            f"Exam {self.exam.id} ({selection_mode(self.exam)}): "
            f"{len(self.questions)} questions for user {self.user.uid}"
        )
        return self.questions

    def submit_answer(self, idx: int, value: Any) -> None:
        """Record the answer for position `idx`. None clears it."""
        if not 0 <= idx < len(self.questions):
            raise IndexError(f"Question index {idx} out of range (0-{len(self.questions) - 1})")
        self.answers[idx] = value

    def get_current_question(self) -> Optional[Question]:
        if self.current_question_idx >= len(self.questions):
            return None
        return self.questions[self.current_question_idx]

    def go_next(self) -> None:
        self.current_question_idx = min(self.current_question_idx + 1, max(len(self.questions) - 1, 0))

    def go_previous(self) -> None:
        self.current_question_idx = max(self.current_question_idx - 1, 0)

    @property
    def is_last_question(self) -> bool:
        return self.current_question_idx >= len(self.questions) - 1

    @property
    def progress_percent(self) -> float:
        if not self.questions:
            return 0.0
        return self.current_question_idx / len(self.questions) * 100

    def get_session_summary(self) -> Dict:
        """Live counters for the exam page."""
        answered = sum(1 for a in self.answers if a is not None)
        return {
            "exam_id": self.exam.id,
            "current_question": self.current_question_idx + 1,
            "total_questions": len(self.questions),
            "questions_answered": answered,
            "questions_skipped": len(self.questions) - answered,
        }

    def end_session(self) -> Dict:
        """
        Grade the attempt and work out the profile update.

        Returns:
            {attempt, score, correct, new_badges, badges, duration_seconds};
            `attempt` has no id yet
        """
        self.ended_at = datetime.now(timezone.utc)
        self.status = "completed"

        duration = (self.ended_at - self.started_at).total_seconds()
        pct = score(self.questions, self.answers)
        earned = new_badges(pct, self.user.badges, len(self.user.attempts))
        attempt = Attempt(
            user_id=self.user.uid,
            exam_id=self.exam.id,
            answers=list(self.answers),
            question_ids=[q.id for q in self.questions],
            score=pct,
            timestamp=self.ended_at.isoformat(),
        )
        logger.info(f"Exam {self.exam.id} completed by {self.user.uid} in {duration:.0f}s: score={pct}, new badges={sorted(earned)}")
        return {
            "attempt": attempt,
            "score": pct,
            "correct": grade(self.questions, self.answers),
            "new_badges": earned,
            "badges": merge_badges(self.user.badges, earned),
            "duration_seconds": duration,
        }


def submit_exam(db, session: ExamSession) -> Optional[str]:
    """
    Finish `session`, store the attempt and update the user's badges and attempts.

    Args:
        db: DatabaseClient (or anything with save_attempt / update_profile_progress)
        session: Completed exam session

    Returns:
        New attempt id, or None if the attempt could not be written
    """
    result = session.end_session()
    attempt_id = db.save_attempt(result["attempt"])
    if not attempt_id:
        logger.error(f"Attempt for exam {session.exam.id} was not saved; profile left unchanged")
        return None

    user = session.user
    attempts = user.attempts + [attempt_id]
    if db.update_profile_progress(user.uid, result["badges"], attempts):
        user.badges = result["badges"]
        user.attempts = attempts
    return attempt_id
