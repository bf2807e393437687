"""Session configuration loaded from game.json."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Fixed constants a session starts from."""

    start_slide_id: str
    initial_balance: int | float = 5550
    goal_amount: int | float = 15000
    initial_credit_score: int = 680
    paycheck_amount: int | float = 500
    typing_ms_per_char: int = 35
    notification_stagger: float = 0.5
    notification_duration: float = 3.0
    notification_fade: float = 0.3
    wallet_background: str = ""
    wallet_background_with_credit: str = ""
