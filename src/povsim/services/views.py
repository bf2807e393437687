"""View models handed to the presentation sink."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from povsim.domain.state import ScenePhase


@dataclass(frozen=True, slots=True)
class MetricsView:
    """Snapshot for the metrics bar."""

    balance: int | float
    total_saved: int | float
    goal_amount: int | float
    goal_progress_percent: int
    goal_active: bool
    credit_visible: bool
    credit_score: int


@dataclass(frozen=True, slots=True)
class ChoiceView:
    label: str
    subtitle: str | None
    locked: bool
    enabled: bool


@dataclass(frozen=True, slots=True)
class SlideView:
    """Data returned to the presentation layer for the current slide."""

    slide_id: str
    phase: ScenePhase
    text: str
    background: str
    fact_title: str | None
    fact_text: str | None
    choices: List[ChoiceView] = field(default_factory=list)
    popup_open: bool = False


@dataclass(frozen=True, slots=True)
class PopupView:
    kind: str
    title: str | None
    text: str


@dataclass(frozen=True, slots=True)
class CreditReportView:
    score: int
    rating: str
    explanations: List[str]


@dataclass(frozen=True, slots=True)
class WalletView:
    balance: int | float
    total_saved: int | float
    background: str
    credit_card_active: bool


@dataclass(frozen=True, slots=True)
class AchievementView:
    """An info panel entry. Locked entries carry no description."""

    id: str
    title: str
    description: str | None
    unlocked: bool


@dataclass(eq=False, slots=True)
class Notification:
    """A transient banner; identity matters, not value."""

    notification_id: int
    text: str
