"""Domain-level session state."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List

from povsim.domain.defs import GameConfig


class ScenePhase(IntEnum):
    """Sequential reveal phases of a single slide."""

    DIALOGUE = 0
    FACT = 1
    CHOICES = 2


@dataclass(slots=True)
class PopupState:
    """An open popup and where dismissing it leads."""

    kind: str
    title: str | None
    text: str
    next_slide_id: str | None


@dataclass
class GameState:
    """Ledger balances plus the traversal cursor for one session."""

    current_slide_id: str
    phase: ScenePhase = ScenePhase.DIALOGUE
    account_balance: int | float = 5550
    total_saved: int | float = 0
    total_spent: int | float = 0
    goal_amount: int | float = 15000
    goal_unlocked: bool = False
    goal_active: bool = False
    credit_score: int = 680
    credit_visible: bool = False
    current_paycheck_amount: int | float = 500
    completed_milestones: List[int] = field(default_factory=list)
    unlocked_facts: List[str] = field(default_factory=list)
    flags: Dict[str, bool] = field(default_factory=dict)
    popup: PopupState | None = None
    pending_popup_successors: Dict[str, str] = field(default_factory=dict)
    content_error: str | None = None

    @classmethod
    def from_config(cls, config: GameConfig) -> "GameState":
        """Create the state a new session starts from."""
        return cls(
            current_slide_id=config.start_slide_id,
            account_balance=config.initial_balance,
            goal_amount=config.goal_amount,
            credit_score=config.initial_credit_score,
            current_paycheck_amount=config.paycheck_amount,
        )
