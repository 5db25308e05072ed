"""Supabase client, auth and admin CRUD. One client per browser session, kept in Streamlit session state."""
import logging
import os
from collections import Counter

import streamlit as st
from dotenv import load_dotenv
from supabase import create_client, Client

from engine import QUESTION_TYPES, UNASSIGNED_CATEGORY

load_dotenv()

log = logging.getLogger(__name__)

SESSION_CLIENT_KEY = "supabase_client"


def _env_client() -> Client:
    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_KEY")
    if not url or not key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")
    return create_client(url, key)


def get_supabase(state=None) -> Client:
    """
    Client for the current browser session. The signed-in user's JWT lives on
    the client, so clients are never shared between sessions.
    `state` defaults to st.session_state.
    """
    if state is None:
        state = st.session_state
    if SESSION_CLIENT_KEY not in state:
        state[SESSION_CLIENT_KEY] = _env_client()
    return state[SESSION_CLIENT_KEY]


def drop_supabase(state=None):
    """Forget this session's client; the next get_supabase() starts signed out."""
    if state is None:
        state = st.session_state
    state.pop(SESSION_CLIENT_KEY, None)


def get_supabase_uncached() -> Client:
    """For CLI/scripts (no Streamlit context)."""
    return _env_client()


# --- Auth ---

def _auth_user(response) -> dict:
    user = getattr(response, "user", None)
    if user is None:
        raise ValueError("Authentication failed")
    meta = getattr(user, "user_metadata", None) or {}
    return {"uid": str(user.id), "email": user.email or "", "name": meta.get("name", "")}


def sign_in(email: str, password: str, client: Client | None = None) -> dict:
    """Email/password sign-in. Returns {uid, email, name}; raises on bad credentials."""
    c = client or get_supabase()
    response = c.auth.sign_in_with_password({"email": email, "password": password})
    return _auth_user(response)


def sign_up(email: str, password: str, name: str = "", client: Client | None = None) -> dict:
    c = client or get_supabase()
    response = c.auth.sign_up({"email": email, "password": password, "options": {"data": {"name": name}}})
    return _auth_user(response)


def sign_out(client: Client | None = None):
    # Local scope ends only this session's token, not the user's other sessions
    (client or get_supabase()).auth.sign_out({"scope": "local"})


# --- Questions ---

def list_questions(client: Client | None = None) -> list[dict]:
    r = (client or get_supabase()).table("questions").select("*").order("created_at").execute()
    return r.data or []


def create_question(row: dict, client: Client | None = None) -> dict | None:
    r = (client or get_supabase()).table("questions").insert(row).execute()
    return r.data[0] if r.data else None


def update_question(question_id: str, row: dict, client: Client | None = None):
    return (client or get_supabase()).table("questions").update(row).eq("id", str(question_id)).execute()


def delete_question(question_id: str, client: Client | None = None):
    return (client or get_supabase()).table("questions").delete().eq("id", str(question_id)).execute()


def insert_questions_bulk(client: Client, rows: list[dict], chunk_size: int = 200) -> int:
    """Bulk insert into questions in chunks. Ids are assigned by the database."""
    rows = [{k: v for k, v in r.items() if k != "id"} for r in rows]
    n_chunks = (len(rows) + chunk_size - 1) // chunk_size
    for i in range(0, len(rows), chunk_size):
        chunk = rows[i : i + chunk_size]
        chunk_num = i // chunk_size + 1
        log.info("Inserting chunk %d/%d (%d rows)", chunk_num, n_chunks, len(chunk))
        client.table("questions").insert(chunk).execute()
    return len(rows)


def get_question_counts(client: Client | None = None) -> dict:
    """Returns dict with total and per-type counts (for the admin dashboard)."""
    out = {t: 0 for t in QUESTION_TYPES}
    out["total"] = 0
    try:
        r = (client or get_supabase()).table("questions").select("type").execute()
        counts = Counter(row.get("type") or "" for row in (r.data or []))
        for t in QUESTION_TYPES:
            out[t] = counts.get(t, 0)
        out["total"] = sum(counts.values())
    except Exception as e:
        log.error(f"Error getting question counts: {e}")
    return out


# --- Categories ---

def list_categories(client: Client | None = None) -> list[dict]:
    r = (client or get_supabase()).table("categories").select("*").order("name").execute()
    return r.data or []


def create_category(name: str, description: str = "", client: Client | None = None) -> dict | None:
    name = (name or "").strip()
    if not name:
        raise ValueError("Category name is required")
    r = (client or get_supabase()).table("categories").insert({"name": name, "description": description}).execute()
    return r.data[0] if r.data else None


def delete_category(category_id: str, client: Client | None = None):
    """Delete a category. Its questions stay and show as Unassigned."""
    c = client or get_supabase()
    (
        c.table("questions")
        .update({"category_id": None, "category_name": UNASSIGNED_CATEGORY})
        .eq("category_id", str(category_id))
        .execute()
    )
    c.table("categories").delete().eq("id", str(category_id)).execute()


# --- Exams ---

def list_exams(client: Client | None = None) -> list[dict]:
    r = (client or get_supabase()).table("exams").select("*").order("title").execute()
    return r.data or []


def save_exam(row: dict, exam_id: str | None = None, client: Client | None = None) -> dict | None:
    """Insert a new exam, or update `exam_id` when editing."""
    c = client or get_supabase()
    if exam_id:
        r = c.table("exams").update(row).eq("id", str(exam_id)).execute()
    else:
        r = c.table("exams").insert(row).execute()
    return r.data[0] if r.data else None


def delete_exam(exam_id: str, client: Client | None = None):
    return (client or get_supabase()).table("exams").delete().eq("id", str(exam_id)).execute()
