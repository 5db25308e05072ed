"""Badge award rules. Each rule looks at one attempt and may award one badge."""
from typing import Callable, Iterable, List, Optional, Sequence, Set

from engine import BADGE_FIRST_ATTEMPT, BADGE_HIGH_SCORE, HIGH_SCORE_THRESHOLD

# (score, current_badges, prior_attempt_count) -> badge id or None
BadgeRule = Callable[[int, Set[str], int], Optional[str]]


def first_attempt_rule(score: int, current: Set[str], prior_attempts: int) -> Optional[str]:
    return BADGE_FIRST_ATTEMPT if prior_attempts == 0 else None


def high_score_rule(score: int, current: Set[str], prior_attempts: int) -> Optional[str]:
    return BADGE_HIGH_SCORE if score >= HIGH_SCORE_THRESHOLD else None


BADGE_RULES: List[BadgeRule] = [
    first_attempt_rule,
    high_score_rule,
]


def new_badges(
    score: int,
    current_badges: Iterable[str],
    prior_attempt_count: int,
    rules: Sequence[BadgeRule] = BADGE_RULES,
) -> Set[str]:
    """
    Badges earned by this attempt that the user does not already hold.

    Rules are evaluated independently and their results unioned, so adding a
    rule never changes what the others award.
    """
    current = set(current_badges or [])
    earned = set()
    for rule in rules:
        badge = rule(score, current, prior_attempt_count)
        if badge and badge not in current:
            earned.add(badge)
    return earned


def merge_badges(current_badges: Iterable[str], earned: Iterable[str]) -> List[str]:
    """Existing badges in their order, then newly earned ones, without duplicates."""
    merged = list(dict.fromkeys(current_badges or []))
    for badge in sorted(earned):
        if badge not in merged:
            merged.append(badge)
    return merged
