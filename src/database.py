"""
Database operations for the exam flow.
Handles Supabase reads/writes for the question pool, exams, attempts and profiles.
"""
import logging
from typing import Dict, List, Optional

from supabase import Client

from db import get_supabase_uncached
from src.models import Attempt, Exam, Question, question_from_record

logger = logging.getLogger(__name__)


class DatabaseClient:
    """Wrapper around Supabase client with exam-platform operations."""

    def __init__(self, client: Optional[Client] = None):
        self.client: Client = client or get_supabase_uncached()

    # ============= Questions / Exams =============

    def get_question_pool(self) -> List[Question]:
        """All questions in storage order, parsed into question variants."""
        try:
            response = self.client.table("questions").select("*").order("created_at").execute()
            return [question_from_record(row) for row in (response.data or [])]
        except Exception as e:
            logger.error(f"Error fetching question pool: {e}")
            return []

    def get_exam(self, exam_id: str) -> Optional[Exam]:
        """One exam by id, or None if it does not exist."""
        try:
            response = self.client.table("exams").select("*").eq("id", str(exam_id)).limit(1).execute()
            if response.data:
                return Exam.from_record(response.data[0])
            return None
        except Exception as e:
            logger.error(f"Error fetching exam {exam_id}: {e}")
            return None

    def get_exams_map(self) -> Dict[str, Dict]:
        """{exam_id: exam row} for name lookups."""
        try:
            response = self.client.table("exams").select("*").execute()
            return {str(row["id"]): row for row in (response.data or [])}
        except Exception as e:
            logger.error(f"Error fetching exams: {e}")
            return {}

    # ============= Attempts =============

    def save_attempt(self, attempt: Attempt) -> Optional[str]:
        """
        Insert an attempt record.

        Returns:
            Generated attempt id or None if failed
        """
        try:
            response = self.client.table("attempts").insert(attempt.to_record()).execute()
            if response.data:
                attempt.id = str(response.data[0]["id"])
                return attempt.id
            return None
        except Exception as e:
            logger.error(f"Error saving attempt for exam {attempt.exam_id}: {e}")
            return None

    def get_attempt(self, attempt_id: str) -> Optional[Attempt]:
        try:
            response = self.client.table("attempts").select("*").eq("id", str(attempt_id)).limit(1).execute()
            if response.data:
                return Attempt.from_record(response.data[0])
            return None
        except Exception as e:
            logger.error(f"Error fetching attempt {attempt_id}: {e}")
            return None

    def list_attempts(self, user_id: Optional[str] = None) -> List[Dict]:
        """Attempt rows, newest first; all users unless `user_id` is given."""
        try:
            query = self.client.table("attempts").select("*")
            if user_id:
                query = query.eq("user_id", str(user_id))
            response = query.order("timestamp", desc=True).execute()
            return response.data if response.data else []
        except Exception as e:
            logger.error(f"Error fetching attempts: {e}")
            return []

    def get_top_attempts(self, limit: int = 10) -> List[Dict]:
        """Highest-scoring attempts for the leaderboard."""
        try:
            response = (
                self.client.table("attempts")
                .select("*")
                .order("score", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data if response.data else []
        except Exception as e:
            logger.error(f"Error fetching leaderboard attempts: {e}")
            return []

    # ============= Profiles =============

    def get_profile(self, uid: str) -> Optional[Dict]:
        try:
            response = self.client.table("profiles").select("*").eq("uid", str(uid)).limit(1).execute()
            return response.data[0] if response.data else None
        except Exception as e:
            logger.error(f"Error fetching profile {uid}: {e}")
            return None

    def ensure_profile(self, uid: str, name: str = "", email: str = "") -> Optional[Dict]:
        """Return the user's profile, creating a default one on first sign-in."""
        profile = self.get_profile(uid)
        if profile:
            return profile
        row = {
            "uid": str(uid),
            "name": name or "",
            "email": email or "",
            "is_admin": False,
            "badges": [],
            "attempts": [],
        }
        try:
            response = self.client.table("profiles").insert(row).execute()
            logger.info(f"Created profile for {uid}")
            return response.data[0] if response.data else row
        except Exception as e:
            logger.error(f"Error creating profile {uid}: {e}")
            return None

    def update_profile_progress(self, uid: str, badges: List[str], attempts: List[str]) -> bool:
        """Replace the user's badges and attempt ids."""
        try:
            (
                self.client.table("profiles")
                .update({"badges": list(badges), "attempts": list(attempts)})
                .eq("uid", str(uid))
                .execute()
            )
            return True
        except Exception as e:
            logger.error(f"Error updating profile {uid}: {e}")
            return False

    def get_users_map(self) -> Dict[str, Dict]:
        """{uid: profile row} for name lookups."""
        try:
            response = self.client.table("profiles").select("uid", "name", "email").execute()
            return {str(row["uid"]): row for row in (response.data or [])}
        except Exception as e:
            logger.error(f"Error fetching profiles: {e}")
            return {}
