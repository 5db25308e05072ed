"""Leaderboard and admin progress tables built from attempt rows."""
from datetime import datetime
from typing import Dict, List


def _user_label(users: Dict[str, Dict], user_id: str) -> str:
    user = users.get(user_id) or {}
    return user.get("name") or user.get("email") or user_id


def _exam_label(exams: Dict[str, Dict], exam_id: str) -> str:
    exam = exams.get(exam_id) or {}
    return exam.get("title") or exam_id


def _format_timestamp(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except (AttributeError, ValueError):
        return value or ""


def leaderboard_rows(attempts: List[Dict], users: Dict[str, Dict], exams: Dict[str, Dict], limit: int = 10) -> List[Dict]:
    """Top attempts by score with readable student and exam names."""
    ranked = sorted(attempts, key=lambda a: a.get("score") or 0, reverse=True)[:limit]
    return [
        {
            "#": i,
            "Student": _user_label(users, str(a.get("user_id") or "")),
            "Exam": _exam_label(exams, str(a.get("exam_id") or "")),
            "Score": f"{a.get('score') or 0}%",
        }
        for i, a in enumerate(ranked, start=1)
    ]


def progress_rows(attempts: List[Dict], users: Dict[str, Dict], exams: Dict[str, Dict]) -> List[Dict]:
    """Every attempt, for the admin progress tab."""
    return [
        {
            "Student": _user_label(users, str(a.get("user_id") or "")),
            "Exam": _exam_label(exams, str(a.get("exam_id") or "")),
            "Score": a.get("score") or 0,
            "Date": _format_timestamp(a.get("timestamp") or ""),
        }
        for a in attempts
    ]


def format_answer(question, answer) -> str:
    """A user's answer as shown on the result screen."""
    if answer is None:
        return "—"
    if question is None:
        return str(answer)
    if question.type == "mcq":
        try:
            return question.options[int(answer)]
        except (TypeError, ValueError, IndexError):
            return str(answer)
    if question.type == "truefalse":
        return "True" if answer else "False"
    if question.type == "drag" and isinstance(answer, (list, tuple)):
        return " → ".join(str(a) for a in answer)
    return str(answer)
