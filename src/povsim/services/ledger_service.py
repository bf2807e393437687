"""Financial state mutations and the derived credit score."""
from __future__ import annotations

import logging
import math

from povsim.domain import credit_score
from povsim.domain.defs import LedgerEffect, LedgerOp
from povsim.domain.state import GameState
from povsim.services.sink import PresentationSink
from povsim.services.views import CreditReportView, MetricsView

logger = logging.getLogger(__name__)


def is_valid_amount(amount: object) -> bool:
    """Return True for finite, non-negative numbers. Booleans are not amounts."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return False
    return math.isfinite(amount) and amount >= 0


class LedgerService:
    """All balance changes go through here.

    Every accepted mutation recomputes the credit score and pushes a fresh
    metrics snapshot to the sink before returning, so observers never see a
    balance paired with a stale score. Invalid amounts are dropped without
    touching state.
    """

    def __init__(self, sink: PresentationSink) -> None:
        self._sink = sink

    def credit(self, state: GameState, amount: object) -> bool:
        if not is_valid_amount(amount):
            logger.debug("Ignoring credit with invalid amount %r", amount)
            return False
        state.account_balance += amount
        self._commit(state)
        self._sink.flash_balance("credit")
        return True

    def debit(self, state: GameState, amount: object) -> bool:
        if not is_valid_amount(amount):
            logger.debug("Ignoring debit with invalid amount %r", amount)
            return False
        actual = min(amount, state.account_balance)
        # The full requested amount is recorded as spent even when the
        # balance floor absorbs part of it.
        state.account_balance = max(0, state.account_balance - amount)
        state.total_spent += amount
        self._commit(state)
        if actual > 0:
            self._sink.flash_balance("debit")
        return True

    def transfer_to_savings(self, state: GameState, amount: object) -> bool:
        if not is_valid_amount(amount):
            logger.debug("Ignoring savings transfer with invalid amount %r", amount)
            return False
        actual = min(amount, state.account_balance)
        if actual <= 0:
            return False
        state.account_balance -= actual
        state.total_saved += actual
        self._commit(state)
        self._sink.flash_balance("debit")
        return True

    def debit_from_savings(self, state: GameState, amount: object) -> bool:
        if not is_valid_amount(amount):
            logger.debug("Ignoring savings debit with invalid amount %r", amount)
            return False
        actual = min(amount, state.total_saved)
        if actual <= 0:
            return False
        state.total_saved = max(0, state.total_saved - amount)
        self._commit(state)
        self._sink.flash_goal("debit")
        return True

    def apply(self, state: GameState, effect: LedgerEffect) -> bool:
        """Dispatch a ledger effect onto the matching operation."""
        if effect.op is LedgerOp.CREDIT:
            return self.credit(state, effect.amount)
        if effect.op is LedgerOp.DEBIT:
            return self.debit(state, effect.amount)
        if effect.op is LedgerOp.TRANSFER_TO_SAVINGS:
            return self.transfer_to_savings(state, effect.amount)
        if effect.op is LedgerOp.DEBIT_FROM_SAVINGS:
            return self.debit_from_savings(state, effect.amount)
        raise TypeError(f"Unhandled ledger operation: {effect.op!r}")

    def set_balances(
        self,
        state: GameState,
        *,
        balance: int | float | None = None,
        total_saved: int | float | None = None,
    ) -> None:
        """Overwrite balances outright. Negative values clamp to zero."""
        if balance is not None:
            state.account_balance = max(0, balance)
        if total_saved is not None:
            state.total_saved = max(0, total_saved)
        self._commit(state)

    def recompute_score(self, state: GameState) -> int:
        state.credit_score = credit_score.compute_score(
            state.account_balance, state.total_saved, state.total_spent, state.goal_amount
        )
        return state.credit_score

    def credit_report(self, state: GameState) -> CreditReportView:
        return CreditReportView(
            score=state.credit_score,
            rating=credit_score.credit_rating(state.credit_score),
            explanations=credit_score.explain_score(
                state.account_balance, state.total_saved, state.total_spent, state.goal_amount
            ),
        )

    def refresh_metrics(self, state: GameState) -> MetricsView:
        view = build_metrics_view(state)
        self._sink.update_metrics(view)
        return view

    def _commit(self, state: GameState) -> None:
        self.recompute_score(state)
        self.refresh_metrics(state)


def build_metrics_view(state: GameState) -> MetricsView:
    return MetricsView(
        balance=state.account_balance,
        total_saved=state.total_saved,
        goal_amount=state.goal_amount,
        goal_progress_percent=credit_score.goal_progress_percent(state.total_saved, state.goal_amount),
        goal_active=state.goal_active,
        credit_visible=state.credit_visible,
        credit_score=state.credit_score,
    )
