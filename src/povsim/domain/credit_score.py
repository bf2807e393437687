"""Pure credit score rules derived from a ledger snapshot."""
from __future__ import annotations

import math

BASE_SCORE = 680
MIN_SCORE = 300
MAX_SCORE = 850

OVERSPENDING_PENALTY = 20
BUFFER_BONUS = 15
GOAL_PROGRESS_BONUS = 25

HEALTHY_BUFFER_THRESHOLD = 3000
GOAL_PROGRESS_THRESHOLD = 0.5

_RATING_BANDS = (
    (800, "Excellent"),
    (740, "Very Good"),
    (670, "Good"),
    (580, "Fair"),
)

_OVERSPENDING_NOTE = "Spending has exceeded savings, which can hurt your score."
_BUFFER_NOTE = "Keeping a healthy buffer in your account helps your score."
_GOAL_NOTE = "Strong progress toward your savings goal improves your score."
_FALLBACK_NOTE = "Keep saving and managing spending to maintain or improve your score."


def goal_progress(total_saved: float, goal_amount: float) -> float:
    """Return saved/goal as a ratio, or 0 when there is no positive goal."""
    if goal_amount <= 0:
        return 0.0
    return total_saved / goal_amount


def goal_progress_percent(total_saved: float, goal_amount: float) -> int:
    """Return progress toward the goal as a whole percentage capped at 100."""
    ratio = min(1.0, goal_progress(total_saved, goal_amount))
    return int(math.floor(ratio * 100 + 0.5))


def is_overspending(total_spent: float, total_saved: float) -> bool:
    return total_spent > total_saved


def has_healthy_buffer(balance: float) -> bool:
    return balance > HEALTHY_BUFFER_THRESHOLD


def has_strong_goal_progress(total_saved: float, goal_amount: float) -> bool:
    return goal_progress(total_saved, goal_amount) > GOAL_PROGRESS_THRESHOLD


def compute_score(balance: float, total_saved: float, total_spent: float, goal_amount: float) -> int:
    """Score a snapshot. Deterministic and clamped to [300, 850]."""
    score = BASE_SCORE
    if is_overspending(total_spent, total_saved):
        score -= OVERSPENDING_PENALTY
    if has_healthy_buffer(balance):
        score += BUFFER_BONUS
    if has_strong_goal_progress(total_saved, goal_amount):
        score += GOAL_PROGRESS_BONUS
    return max(MIN_SCORE, min(MAX_SCORE, score))


def credit_rating(score: int) -> str:
    """Map a score onto its rating label."""
    for floor, label in _RATING_BANDS:
        if score >= floor:
            return label
    return "Poor"


def explain_score(balance: float, total_saved: float, total_spent: float, goal_amount: float) -> list[str]:
    """Return the bullet points behind the current score, at most three."""
    bullets: list[str] = []
    if is_overspending(total_spent, total_saved):
        bullets.append(_OVERSPENDING_NOTE)
    if has_healthy_buffer(balance):
        bullets.append(_BUFFER_NOTE)
    if has_strong_goal_progress(total_saved, goal_amount):
        bullets.append(_GOAL_NOTE)
    if not bullets:
        bullets.append(_FALLBACK_NOTE)
    return bullets[:3]
