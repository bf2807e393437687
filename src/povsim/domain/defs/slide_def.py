"""Slide definition structures used by the runtime."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union


class LedgerOp(Enum):
    """The four ledger mutations a choice or slide can request."""

    CREDIT = "credit"
    DEBIT = "debit"
    TRANSFER_TO_SAVINGS = "transfer_to_savings"
    DEBIT_FROM_SAVINGS = "debit_from_savings"


@dataclass(frozen=True, slots=True)
class LedgerEffect:
    """Ledger mutation. ``amount`` is kept as authored and checked when applied."""

    op: LedgerOp
    amount: object


@dataclass(frozen=True, slots=True)
class UnlockFactEffect:
    fact_id: str


@dataclass(frozen=True, slots=True)
class ShowTipEffect:
    """Unlock a fact and flash its title as a notification."""

    fact_id: str
    title: str | None = None


@dataclass(frozen=True, slots=True)
class CompleteMilestoneEffect:
    milestone: int


@dataclass(frozen=True, slots=True)
class ActivateGoalEffect:
    pass


@dataclass(frozen=True, slots=True)
class RevealCreditScoreEffect:
    pass


@dataclass(frozen=True, slots=True)
class SetFlagEffect:
    flag_id: str
    value: bool = True


@dataclass(frozen=True, slots=True)
class SetBalancesEffect:
    """Overwrite balances outright (used by time jumps)."""

    balance: int | float | None = None
    total_saved: int | float | None = None


@dataclass(frozen=True, slots=True)
class SetPaycheckEffect:
    amount: int | float


@dataclass(frozen=True, slots=True)
class ShowPopupEffect:
    """Suspend the phase flow behind a modal until it is dismissed.

    ``text`` and ``next_slide_id`` fall back to the owning slide's text and
    successor when omitted.
    """

    kind: str
    title: str | None = None
    text: str | None = None
    next_slide_id: str | None = None
    unlock_fact: str | None = None


SlideEffect = Union[
    LedgerEffect,
    UnlockFactEffect,
    ShowTipEffect,
    CompleteMilestoneEffect,
    ActivateGoalEffect,
    RevealCreditScoreEffect,
    SetFlagEffect,
    SetBalancesEffect,
    SetPaycheckEffect,
    ShowPopupEffect,
]


@dataclass(frozen=True, slots=True)
class ChoiceDef:
    """Represents a selectable choice on a slide."""

    label: str
    subtitle: str | None = None
    next_slide_id: str | None = None
    locked: bool = False
    effect: LedgerEffect | None = None

    @property
    def selectable(self) -> bool:
        return not self.locked and self.next_slide_id is not None


@dataclass(frozen=True, slots=True)
class SlideDef:
    """Fully parsed slide."""

    id: str
    text: str = ""
    background: str = ""
    fact_title: str | None = None
    fact_text: str | None = None
    choices: Tuple[ChoiceDef, ...] = ()
    next_slide_id: str | None = None
    on_enter: Tuple[SlideEffect, ...] = ()
    opening: bool = False
    title_screen: bool = False

    @property
    def has_fact(self) -> bool:
        return bool(self.fact_text and self.fact_text.strip())

    @property
    def auto_advances(self) -> bool:
        """True when continuing from dialogue jumps straight to the successor."""
        return self.next_slide_id is not None and not self.choices
