"""Exam Platform — multi-page Streamlit app over Supabase."""
import sys
from pathlib import Path

# Ensure project root is in path
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import streamlit as st

from db import (
    create_category, create_question, delete_category, delete_exam, delete_question,
    drop_supabase, get_question_counts, get_supabase, insert_questions_bulk, list_categories, list_exams,
    list_questions, save_exam, sign_in, sign_out, sign_up, update_question,
)
from engine import BADGE_LABELS, LEADERBOARD_SIZE, QUESTION_TYPE_LABELS, QUESTION_TYPES
from importer import export_questions, parse_questions
from src.assembly import MODE_ALL, MODE_FIXED, MODE_RANDOM, display_options, exam_record, review_questions, selection_mode
from src.database import DatabaseClient
from src.engine import ExamSession, submit_exam
from src.grading import evaluate
from src.models import (
    DragQuestion, Exam, McqQuestion, ShortAnswerQuestion, TrueFalseQuestion, UserSession,
    question_record_from_form,
)
from src.reports import format_answer, leaderboard_rows, progress_rows

st.set_page_config(page_title="Exam Platform", layout="wide")


def get_database() -> DatabaseClient:
    """Data access for this browser session, on its own signed-in client."""
    return DatabaseClient(get_supabase())


def badge_label(badge: str) -> str:
    return BADGE_LABELS.get(badge, badge)


# ----- Session / navigation -----
if "user" not in st.session_state:
    st.session_state["user"] = None  # UserSession once signed in
if "exam_session" not in st.session_state:
    st.session_state["exam_session"] = None
if "result_attempt_id" not in st.session_state:
    st.session_state["result_attempt_id"] = None

user: UserSession | None = st.session_state["user"]

PAGES = ["Home", "Exams", "Take Exam", "Results", "Leaderboard"]
if user and user.is_admin:
    PAGES.append("Admin")

st.sidebar.title("Exam Platform")
default_page = st.query_params.get("page", "Home")
if default_page not in PAGES:
    default_page = "Home"
page = st.sidebar.radio("Navigate", PAGES, index=PAGES.index(default_page), label_visibility="collapsed")
st.query_params["page"] = page

if user:
    st.sidebar.caption(f"Welcome, {user.display_name}")
    if st.sidebar.button("Sign out"):
        try:
            sign_out()
        except Exception as e:
            st.sidebar.warning(f"Sign-out error: {e}")
        drop_supabase()
        st.session_state["user"] = None
        st.session_state["exam_session"] = None
        st.session_state["result_attempt_id"] = None
        st.query_params["page"] = "Home"
        st.rerun()


def go_to(target: str):
    st.query_params["page"] = target
    st.rerun()


def start_session(uid: str, name: str, email: str):
    profile = get_database().ensure_profile(uid, name, email)
    if not profile:
        st.error("Could not load your profile. Check the database connection.")
        st.stop()
    st.session_state["user"] = UserSession.from_profile(profile)
    st.rerun()


def render_answer_input(question, current, key: str):
    """Input widget for one question; returns the answer (None = unanswered)."""
    match question:
        case McqQuestion(options=options):
            labels = ["— Skip —"] + [f"{chr(65 + i)}. {opt}" for i, opt in enumerate(options)]
            index = int(current) + 1 if current is not None else 0
            choice = st.radio("Choose one:", range(len(labels)), format_func=lambda i: labels[i], index=index, key=key)
            return None if choice == 0 else choice - 1
        case TrueFalseQuestion():
            labels = ["— Skip —", "True", "False"]
            index = 0 if current is None else (1 if current else 2)
            choice = st.radio("True or false?", range(3), format_func=lambda i: labels[i], index=index, key=key, horizontal=True)
            return None if choice == 0 else choice == 1
        case ShortAnswerQuestion():
            value = st.text_input("Your answer", value=current or "", key=key, placeholder="Type your answer…")
            return value if value.strip() else None
        case DragQuestion(options=options):
            st.caption("Pick every item, in the correct order.")
            default = [o for o in (current or []) if o in options]
            value = st.multiselect("Order", display_options(question), default=default, key=key)
            return value or None
        case _:
            st.warning("Unsupported question type")
            return None


# ----- Home -----
if page == "Home":
    st.header("Welcome to the Exam Platform")
    if not user:
        tab_in, tab_up = st.tabs(["Sign in", "Create account"])
        with tab_in:
            with st.form("sign_in"):
                email = st.text_input("Email")
                password = st.text_input("Password", type="password")
                if st.form_submit_button("Sign in", type="primary"):
                    try:
                        auth = sign_in(email, password)
                    except Exception as e:
                        st.error(f"Sign-in failed: {e}")
                    else:
                        start_session(auth["uid"], auth["name"], auth["email"])
        with tab_up:
            with st.form("sign_up"):
                name = st.text_input("Name")
                email = st.text_input("Email", key="signup_email")
                password = st.text_input("Password", type="password", key="signup_password")
                if st.form_submit_button("Create account"):
                    try:
                        auth = sign_up(email, password, name)
                    except Exception as e:
                        st.error(f"Sign-up failed: {e}")
                    else:
                        start_session(auth["uid"], name or auth["name"], auth["email"])
        st.stop()

    st.write("Select an option below to get started.")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Take an Exam", type="primary", use_container_width=True):
            go_to("Exams")
    with col2:
        if st.button("View Leaderboard", use_container_width=True):
            go_to("Leaderboard")
    st.subheader("Your Badges")
    if user.badges:
        st.write("  ".join(f"🏅 {badge_label(b)}" for b in user.badges))
    else:
        st.caption("No badges yet")
    st.metric("Exams taken", len(user.attempts))

# ----- Exams -----
elif page == "Exams":
    st.header("Available Exams")
    if not user:
        st.info("Please sign in to view exams.")
        st.stop()
    try:
        exams = list_exams()
    except Exception as e:
        st.error(f"Could not load exams. Check DB and .env (SUPABASE_URL, SUPABASE_KEY). {e}")
        st.stop()
    if not exams:
        st.write("No exams have been created yet.")
    cols = st.columns(3)
    for i, row in enumerate(exams):
        with cols[i % 3]:
            with st.container(border=True):
                st.subheader(row.get("title") or "Untitled Exam")
                st.write(row.get("description") or "No description")
                if st.button("Take Exam", key=f"take_{row['id']}", type="primary"):
                    db = get_database()
                    exam = db.get_exam(row["id"])
                    if exam is None:
                        st.error("Exam not found.")
                        st.stop()
                    session = ExamSession(user, exam, db.get_question_pool())
                    session.generate_questions()
                    st.session_state["exam_session"] = session
                    go_to("Take Exam")

# ----- Take Exam -----
elif page == "Take Exam":
    if not user:
        st.info("Please sign in to take exams.")
        st.stop()
    session: ExamSession | None = st.session_state["exam_session"]
    if session is None:
        st.info("Choose an exam from the Exams page first.")
        st.stop()
    if not session.questions:
        st.warning("Exam not found or no questions available.")
        st.session_state["exam_session"] = None
        st.stop()

    st.header(session.exam.title or "Exam")
    summary = session.get_session_summary()
    st.progress(session.progress_percent / 100)
    st.sidebar.caption(f"Question {summary['current_question']}/{summary['total_questions']} · {summary['questions_answered']} answered")

    idx = session.current_question_idx
    question = session.get_current_question()
    with st.container(border=True):
        st.subheader(f"Question {idx + 1} of {len(session.questions)}")
        st.write(question.text)
        session.submit_answer(idx, render_answer_input(question, session.answers[idx], key=f"q_{session.exam.id}_{idx}"))

    col1, col2, col3 = st.columns([1, 1, 2])
    with col1:
        if st.button("Previous", disabled=idx == 0):
            session.go_previous()
            st.rerun()
    with col2:
        if not session.is_last_question and st.button("Next"):
            session.go_next()
            st.rerun()
    with col3:
        if session.is_last_question and st.button("Submit", type="primary"):
            attempt_id = submit_exam(get_database(), session)
            if not attempt_id:
                st.error("Failed to submit exam. Please try again.")
                st.stop()
            st.session_state["exam_session"] = None
            st.session_state["result_attempt_id"] = attempt_id
            go_to("Results")

# ----- Results -----
elif page == "Results":
    st.header("Your Results")
    if not user:
        st.info("Please sign in to view results.")
        st.stop()
    db = get_database()
    my_attempts = db.list_attempts(user.uid)
    if not my_attempts:
        st.write("You have not completed any exams yet.")
        st.stop()
    exams_map = db.get_exams_map()
    ids = [str(a["id"]) for a in my_attempts]
    selected = st.session_state["result_attempt_id"] if st.session_state["result_attempt_id"] in ids else ids[0]
    attempt_id = st.selectbox(
        "Attempt",
        ids,
        index=ids.index(selected),
        format_func=lambda aid: next(
            f"{(exams_map.get(str(a['exam_id'])) or {}).get('title', a['exam_id'])} · {a['score']}% · {str(a.get('timestamp', ''))[:16]}"
            for a in my_attempts if str(a["id"]) == aid
        ),
    )
    attempt = db.get_attempt(attempt_id)
    if attempt is None:
        st.error("Attempt not found.")
        st.stop()

    st.metric("Score", f"{attempt.score}%")
    if user.badges:
        st.write("Badges earned: " + "  ".join(f"🏅 {badge_label(b)}" for b in user.badges))

    exam = db.get_exam(attempt.exam_id)
    questions, exact = review_questions(attempt, exam, db.get_question_pool())
    if not exact:
        st.warning("This attempt predates saved question order; the questions below may not match your answers.")
    for i, q in enumerate(questions):
        answer = attempt.answers[i] if i < len(attempt.answers) else None
        with st.container(border=True):
            if q is None:
                st.write(f"**Q{i + 1}.** (question no longer available)")
                st.write(f"Your answer: {format_answer(None, answer)}")
                continue
            st.write(f"**Q{i + 1}.** {q.text}")
            st.write(f"Your answer: {format_answer(q, answer)}")
            if evaluate(q, answer):
                st.success("Correct")
            else:
                st.error("Incorrect")
            if q.explanation:
                st.info(f"Explanation: {q.explanation}")

# ----- Leaderboard -----
elif page == "Leaderboard":
    st.header("Leaderboard")
    db = get_database()
    rows = leaderboard_rows(db.get_top_attempts(LEADERBOARD_SIZE), db.get_users_map(), db.get_exams_map(), LEADERBOARD_SIZE)
    if not rows:
        st.write("No attempts yet.")
    else:
        st.dataframe(rows, hide_index=True, use_container_width=True)

# ----- Admin -----
elif page == "Admin":
    if not (user and user.is_admin):
        st.error("Access denied. You are not an administrator.")
        st.stop()
    st.header("Admin Control Center")
    st.caption(f"Signed in as {user.display_name}")
    tab_q, tab_e, tab_p = st.tabs(["Questions", "Exams", "Progress"])

    with tab_q:
        try:
            categories = list_categories()
            questions = list_questions()
        except Exception as e:
            st.error(f"Failed to load question bank: {e}")
            st.stop()
        cat_by_id = {str(c["id"]): c for c in categories}

        counts = get_question_counts()
        cols = st.columns(len(QUESTION_TYPES) + 1)
        cols[0].metric("Total", counts["total"])
        for col, qtype in zip(cols[1:], QUESTION_TYPES):
            col.metric(QUESTION_TYPE_LABELS[qtype], counts[qtype])

        st.subheader("Categories")
        with st.form("new_category", clear_on_submit=True):
            c_name = st.text_input("Name")
            c_desc = st.text_input("Description", placeholder="Optional context for this category")
            if st.form_submit_button("Create category"):
                try:
                    create_category(c_name, c_desc)
                    st.rerun()
                except Exception as e:
                    st.error(f"Failed to create category: {e}")
        for c in categories:
            col1, col2 = st.columns([4, 1])
            col1.write(f"**{c['name']}** — {c.get('description') or ''}")
            if col2.button("Delete", key=f"del_cat_{c['id']}"):
                try:
                    delete_category(c["id"])
                    st.rerun()
                except Exception as e:
                    st.error(f"Failed to delete category: {e}")

        st.divider()
        st.subheader("Import / Export")
        col1, col2 = st.columns(2)
        with col1:
            st.download_button("Export JSON", export_questions(questions), file_name="questions_export.json", mime="application/json")
        with col2:
            import_cat = st.selectbox("Category for imported questions", list(cat_by_id), format_func=lambda cid: cat_by_id[cid]["name"], key="import_cat")
            upload = st.file_uploader("Import JSON", type=["json"])
            if upload is not None and st.button("Import questions", disabled=not categories):
                try:
                    rows, skipped = parse_questions(upload.getvalue().decode("utf-8"), cat_by_id.get(import_cat))
                    insert_questions_bulk(get_supabase(), rows)
                    st.success(f"Imported {len(rows)} questions ({skipped} skipped without text or type)")
                except Exception as e:
                    st.error(f"Failed to import questions: {e}")
        if not categories:
            st.info("Create at least one category before importing questions.")

        st.divider()
        st.subheader("Question bank")
        editing = next((q for q in questions if str(q["id"]) == st.session_state.get("edit_question_id")), None)
        with st.expander("Edit question" if editing else "New question", expanded=editing is not None):
            types = list(QUESTION_TYPES)
            qtype = st.selectbox("Type", types, index=types.index(editing["type"]) if editing and editing.get("type") in types else 0, format_func=lambda t: QUESTION_TYPE_LABELS[t])
            with st.form("question_form"):
                text = st.text_area("Question text", value=(editing or {}).get("text", ""))
                options_text, answer = "", None
                if qtype in ("mcq", "drag"):
                    label = "Options (one per line)" if qtype == "mcq" else "Items in the correct order (one per line)"
                    options_text = st.text_area(label, value="\n".join((editing or {}).get("options") or []))
                if qtype == "mcq":
                    answer = st.number_input("Correct option (1 = first)", min_value=1, value=int((editing or {}).get("answer") or 0) + 1) - 1
                elif qtype == "truefalse":
                    answer = st.radio("Correct answer", [True, False], index=0 if (editing or {}).get("answer", True) else 1, horizontal=True)
                elif qtype == "short":
                    answer = st.text_input("Correct answer", value=str((editing or {}).get("answer") or ""))
                explanation = st.text_area("Explanation", value=(editing or {}).get("explanation", ""), placeholder="Provide an explanation for the correct answer…")
                cat_ids = [""] + list(cat_by_id)
                current_cat = str((editing or {}).get("category_id") or "")
                q_cat = st.selectbox("Category", cat_ids, index=cat_ids.index(current_cat) if current_cat in cat_ids else 0, format_func=lambda cid: cat_by_id[cid]["name"] if cid else "Unassigned")
                if st.form_submit_button("Save question", type="primary"):
                    try:
                        row = question_record_from_form(qtype, text, options_text, answer, explanation, cat_by_id.get(q_cat))
                        if editing:
                            update_question(editing["id"], row)
                        else:
                            create_question(row)
                        st.session_state["edit_question_id"] = None
                        st.rerun()
                    except Exception as e:
                        st.error(f"Failed to save question: {e}")

        for q in questions:
            col1, col2, col3 = st.columns([6, 1, 1])
            col1.write(f"{q.get('text', '')[:100]}  \n`{q.get('type')}` · {q.get('category_name') or 'Unassigned'}")
            if col2.button("Edit", key=f"edit_{q['id']}"):
                st.session_state["edit_question_id"] = str(q["id"])
                st.rerun()
            if col3.button("Delete", key=f"del_q_{q['id']}"):
                try:
                    delete_question(q["id"])
                    st.rerun()
                except Exception as e:
                    st.error(f"Failed to delete question: {e}")
        if not questions:
            st.caption("No questions yet.")

    with tab_e:
        try:
            exams = list_exams()
            question_rows = list_questions()
        except Exception as e:
            st.error(f"Failed to load exams: {e}")
            st.stop()
        q_text = {str(q["id"]): q.get("text", "")[:80] for q in question_rows}
        modes = [MODE_FIXED, MODE_RANDOM, MODE_ALL]
        mode_labels = {MODE_FIXED: "Fixed questions", MODE_RANDOM: "Random selection", MODE_ALL: "All questions"}

        editing = next((e for e in exams if str(e["id"]) == st.session_state.get("edit_exam_id")), None)
        current = Exam.from_record(editing) if editing else None
        with st.expander("Edit exam" if editing else "New exam", expanded=editing is not None):
            mode = st.radio("Question selection", modes, index=modes.index(selection_mode(current)) if current else 0, format_func=lambda m: mode_labels[m], horizontal=True)
            with st.form("exam_form"):
                title = st.text_input("Title", value=current.title if current else "")
                description = st.text_area("Description", value=current.description if current else "")
                picked, count = [], None
                if mode == MODE_FIXED:
                    picked = st.multiselect("Questions", list(q_text), default=[q for q in (current.question_ids if current else []) if q in q_text], format_func=lambda qid: q_text[qid])
                elif mode == MODE_RANDOM:
                    count = st.number_input("Number of random questions", min_value=1, value=(current.random_count if current and current.random_count else 1))
                if st.form_submit_button("Save exam", type="primary"):
                    if not title.strip():
                        st.error("Title is required")
                    else:
                        try:
                            save_exam(exam_record(title.strip(), description, mode, picked, count), exam_id=current.id if current else None)
                            st.session_state["edit_exam_id"] = None
                            st.rerun()
                        except ValueError as e:
                            st.error(str(e))
                        except Exception as e:
                            st.error(f"Failed to save exam: {e}")

        for row in exams:
            exam = Exam.from_record(row)
            m = selection_mode(exam)
            detail = f"{len(exam.question_ids)} fixed" if m == MODE_FIXED else f"Random ({exam.random_count})" if m == MODE_RANDOM else "All questions"
            col1, col2, col3 = st.columns([6, 1, 1])
            col1.write(f"**{exam.title or 'Untitled Exam'}** · {detail}")
            if col2.button("Edit", key=f"edit_exam_{exam.id}"):
                st.session_state["edit_exam_id"] = exam.id
                st.rerun()
            if col3.button("Delete", key=f"del_exam_{exam.id}"):
                try:
                    delete_exam(exam.id)
                    st.rerun()
                except Exception as e:
                    st.error(f"Failed to delete exam: {e}")

    with tab_p:
        db = get_database()
        rows = progress_rows(db.list_attempts(), db.get_users_map(), db.get_exams_map())
        if rows:
            st.dataframe(rows, hide_index=True, use_container_width=True)
        else:
            st.write("No attempts yet.")
