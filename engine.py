"""Exam platform constants: question types, badges, thresholds. No UI."""
# Score is the rounded percentage of correct answers (0-100); unanswered counts as wrong.
# Selection: fixed question_ids > random_count > all questions.

QUESTION_TYPES = ("mcq", "truefalse", "short", "drag")
QUESTION_TYPE_LABELS = {
    "mcq": "Multiple choice",
    "truefalse": "True / False",
    "short": "Short answer",
    "drag": "Ordering",
}
TRUE_FALSE_OPTIONS = ["True", "False"]

BADGE_FIRST_ATTEMPT = "first_attempt"
BADGE_HIGH_SCORE = "high_score"
BADGE_LABELS = {
    BADGE_FIRST_ATTEMPT: "First Attempt",
    BADGE_HIGH_SCORE: "High Scorer",
}
HIGH_SCORE_THRESHOLD = 80

LEADERBOARD_SIZE = 10
UNASSIGNED_CATEGORY = "Unassigned"
