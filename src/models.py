"""
Domain records for the exam platform.

Questions are a closed set of variants, one dataclass per question type, each
carrying its own answer shape. Stored rows are plain dicts (Supabase returns
JSON); `question_from_record` / `question_to_record` convert between the two.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from engine import TRUE_FALSE_OPTIONS, UNASSIGNED_CATEGORY


@dataclass
class _QuestionBase:
    id: str
    text: str
    explanation: str = ""
    category_id: Optional[str] = None
    category_name: str = UNASSIGNED_CATEGORY


@dataclass
class McqQuestion(_QuestionBase):
    """Multiple choice; `answer` is the 0-based index of the correct option."""

    options: List[str] = field(default_factory=list)
    answer: Any = None
    type: str = "mcq"


@dataclass
class TrueFalseQuestion(_QuestionBase):
    answer: Any = None
    options: List[str] = field(default_factory=lambda: list(TRUE_FALSE_OPTIONS))
    type: str = "truefalse"


@dataclass
class ShortAnswerQuestion(_QuestionBase):
    """Free text, compared trimmed and case-insensitively."""

    answer: Any = None
    type: str = "short"


@dataclass
class DragQuestion(_QuestionBase):
    """Ordering task; `answer` is the options in their correct order."""

    options: List[str] = field(default_factory=list)
    answer: Any = None
    type: str = "drag"


@dataclass
class UnsupportedQuestion(_QuestionBase):
    """A stored question whose type this version does not know. Always graded wrong."""

    type: str = ""
    options: List[str] = field(default_factory=list)
    answer: Any = None


Question = Union[McqQuestion, TrueFalseQuestion, ShortAnswerQuestion, DragQuestion, UnsupportedQuestion]


def question_from_record(row: Dict[str, Any]) -> Question:
    """Build the question variant for a stored row. Unknown types never raise."""
    qtype = (row.get("type") or "").strip()
    common = {
        "id": str(row.get("id") or ""),
        "text": row.get("text") or "",
        "explanation": row.get("explanation") or "",
        "category_id": row.get("category_id"),
        "category_name": row.get("category_name") or UNASSIGNED_CATEGORY,
    }
    options = row.get("options")
    options = list(options) if isinstance(options, (list, tuple)) else []
    answer = row.get("answer")

    if qtype == "mcq":
        return McqQuestion(options=options, answer=answer, **common)
    if qtype == "truefalse":
        return TrueFalseQuestion(answer=answer, options=options or list(TRUE_FALSE_OPTIONS), **common)
    if qtype == "short":
        return ShortAnswerQuestion(answer=answer, **common)
    if qtype == "drag":
        return DragQuestion(options=options, answer=answer, **common)
    return UnsupportedQuestion(type=qtype, options=options, answer=answer, **common)


def question_to_record(question: Question) -> Dict[str, Any]:
    row = {
        "id": question.id,
        "text": question.text,
        "type": question.type,
        "answer": question.answer,
        "explanation": question.explanation,
        "category_id": question.category_id,
        "category_name": question.category_name,
    }
    if not isinstance(question, ShortAnswerQuestion):
        row["options"] = list(question.options)
    return row


@dataclass
class Exam:
    id: str
    title: str = ""
    description: str = ""
    question_ids: List[str] = field(default_factory=list)
    random_count: Optional[int] = None

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Exam":
        count = row.get("random_count")
        try:
            count = int(count) if count is not None else None
        except (TypeError, ValueError):
            count = None
        return cls(
            id=str(row.get("id") or ""),
            title=row.get("title") or "",
            description=row.get("description") or "",
            question_ids=[str(q) for q in (row.get("question_ids") or [])],
            random_count=count,
        )


@dataclass
class Attempt:
    """One submitted exam. Written once at submission and never updated."""

    user_id: str
    exam_id: str
    answers: List[Any]
    score: int
    timestamp: str
    question_ids: Optional[List[str]] = None
    id: Optional[str] = None

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Attempt":
        ids = row.get("question_ids")
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            user_id=str(row.get("user_id") or ""),
            exam_id=str(row.get("exam_id") or ""),
            answers=list(row.get("answers") or []),
            score=int(row.get("score") or 0),
            timestamp=row.get("timestamp") or "",
            question_ids=[str(q) for q in ids] if ids else None,
        )

    def to_record(self) -> Dict[str, Any]:
        row = {
            "user_id": self.user_id,
            "exam_id": self.exam_id,
            "answers": self.answers,
            "question_ids": self.question_ids,
            "score": self.score,
            "timestamp": self.timestamp,
        }
        if self.id is not None:
            row["id"] = self.id
        return row


@dataclass
class UserSession:
    """The signed-in user. Passed explicitly to the exam flow and pages."""

    uid: str
    name: str = ""
    email: str = ""
    is_admin: bool = False
    badges: List[str] = field(default_factory=list)
    attempts: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.uid

    @classmethod
    def from_profile(cls, row: Dict[str, Any]) -> "UserSession":
        return cls(
            uid=str(row.get("uid") or ""),
            name=row.get("name") or "",
            email=row.get("email") or "",
            is_admin=bool(row.get("is_admin")),
            badges=list(row.get("badges") or []),
            attempts=[str(a) for a in (row.get("attempts") or [])],
        )


def question_record_from_form(
    qtype: str,
    text: str,
    options_text: str = "",
    answer: Any = None,
    explanation: str = "",
    category: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Questions row from the admin form. Options are one per line; for drag
    questions the options as entered are the correct order.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("Question text is required")
    row: Dict[str, Any] = {"text": text, "type": qtype, "explanation": (explanation or "").strip()}

    if qtype in ("mcq", "drag"):
        options = [line.strip() for line in (options_text or "").splitlines() if line.strip()]
        if len(options) < 2:
            raise ValueError("At least two options are required")
        row["options"] = options
        if qtype == "mcq":
            try:
                idx = int(answer)
            except (TypeError, ValueError):
                raise ValueError("Choose the correct option") from None
            if not 0 <= idx < len(options):
                raise ValueError(f"Correct option must be between 1 and {len(options)}")
            row["answer"] = idx
        else:
            row["answer"] = list(options)
    elif qtype == "truefalse":
        row["options"] = list(TRUE_FALSE_OPTIONS)
        row["answer"] = answer is True or str(answer).strip().lower() == "true"
    elif qtype == "short":
        row["answer"] = str(answer or "").strip()
        if not row["answer"]:
            raise ValueError("Short answer questions need a correct answer")
    else:
        raise ValueError(f"Unknown question type: {qtype}")

    if category:
        row["category_id"] = category["id"]
        row["category_name"] = category["name"]
    else:
        row["category_id"] = None
        row["category_name"] = UNASSIGNED_CATEGORY
    return row
