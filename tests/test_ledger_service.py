import math

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from povsim.domain import credit_score
from povsim.domain.defs import LedgerEffect, LedgerOp
from povsim.domain.state import GameState
from povsim.services.ledger_service import LedgerService, is_valid_amount
from tests.helpers.recording_sink import RecordingSink


def _ledger() -> tuple[LedgerService, RecordingSink]:
    sink = RecordingSink()
    return LedgerService(sink), sink


def _state(**overrides) -> GameState:
    return GameState(current_slide_id="test", **overrides)


def test_credit_adds_to_balance_and_rescores() -> None:
    ledger, sink = _ledger()
    state = _state()

    assert ledger.credit(state, 500) is True

    assert state.account_balance == 6050
    assert state.credit_score == 695
    assert sink.of("flash_balance") == [("credit",)]
    metrics = sink.last("update_metrics")[0]
    assert metrics.balance == 6050
    assert metrics.credit_score == 695


def test_credit_then_transfer_moves_money_into_savings() -> None:
    ledger, sink = _ledger()
    state = _state()

    ledger.credit(state, 500)
    ledger.transfer_to_savings(state, 350)

    assert state.account_balance == 5700
    assert state.total_saved == 350
    assert state.total_spent == 0
    assert state.credit_score == 695
    assert sink.of("flash_balance") == [("credit",), ("debit",)]


def test_balance_override_then_savings_debit() -> None:
    ledger, sink = _ledger()
    state = _state()

    ledger.set_balances(state, balance=1050, total_saved=15151)
    assert state.credit_score == 705

    assert ledger.debit_from_savings(state, 8000) is True
    assert state.total_saved == 7151
    assert state.account_balance == 1050
    assert state.credit_score == 680
    assert sink.of("flash_goal") == [("debit",)]


def test_debit_records_full_amount_even_when_balance_floors() -> None:
    ledger, sink = _ledger()
    state = _state(account_balance=100)

    assert ledger.debit(state, 250) is True

    assert state.account_balance == 0
    assert state.total_spent == 250
    assert sink.of("flash_balance") == [("debit",)]


def test_debit_from_empty_balance_still_counts_as_spent_without_flash() -> None:
    ledger, sink = _ledger()
    state = _state(account_balance=0)

    assert ledger.debit(state, 50) is True

    assert state.account_balance == 0
    assert state.total_spent == 50
    assert sink.of("flash_balance") == []
    assert state.credit_score == 660


def test_transfer_caps_at_balance_and_is_noop_when_empty() -> None:
    ledger, _ = _ledger()
    state = _state(account_balance=200)

    assert ledger.transfer_to_savings(state, 350) is True
    assert state.account_balance == 0
    assert state.total_saved == 200

    assert ledger.transfer_to_savings(state, 10) is False
    assert state.total_saved == 200


def test_debit_from_savings_noop_when_nothing_saved() -> None:
    ledger, sink = _ledger()
    state = _state()

    assert ledger.debit_from_savings(state, 100) is False
    assert state.total_saved == 0
    assert sink.calls == []


@pytest.mark.parametrize("amount", [-1, -0.01, math.nan, math.inf, "100", None, True, [10]])
def test_invalid_amounts_are_ignored(amount: object) -> None:
    ledger, sink = _ledger()
    state = _state()

    for operation in (ledger.credit, ledger.debit, ledger.transfer_to_savings, ledger.debit_from_savings):
        assert operation(state, amount) is False

    assert state.account_balance == 5550
    assert state.total_saved == 0
    assert state.total_spent == 0
    assert sink.calls == []


def test_zero_credit_is_accepted() -> None:
    ledger, sink = _ledger()
    state = _state()

    assert ledger.credit(state, 0) is True
    assert state.account_balance == 5550
    assert sink.of("flash_balance") == [("credit",)]


def test_apply_dispatches_on_operation() -> None:
    ledger, _ = _ledger()
    state = _state()

    ledger.apply(state, LedgerEffect(op=LedgerOp.TRANSFER_TO_SAVINGS, amount=550))
    ledger.apply(state, LedgerEffect(op=LedgerOp.DEBIT, amount=1000))

    assert state.account_balance == 4000
    assert state.total_saved == 550
    assert state.total_spent == 1000


def test_set_balances_clamps_negative_values() -> None:
    ledger, _ = _ledger()
    state = _state()

    ledger.set_balances(state, balance=-5, total_saved=-10)

    assert state.account_balance == 0
    assert state.total_saved == 0


def test_credit_report_reflects_current_snapshot() -> None:
    ledger, _ = _ledger()
    state = _state()
    ledger.set_balances(state, total_saved=9000)

    report = ledger.credit_report(state)

    assert report.score == 720
    assert report.rating == "Good"
    assert len(report.explanations) == 2


def test_is_valid_amount() -> None:
    assert is_valid_amount(0)
    assert is_valid_amount(12.5)
    assert not is_valid_amount(False)
    assert not is_valid_amount(-3)
    assert not is_valid_amount(float("nan"))


_operations = st.sampled_from(list(LedgerOp))
_amounts = st.one_of(
    st.integers(min_value=-500, max_value=20_000),
    st.floats(min_value=-1e6, max_value=1e6),
    st.sampled_from([math.nan, math.inf, -math.inf]),
)


@settings(max_examples=200)
@given(st.lists(st.tuples(_operations, _amounts), max_size=30))
def test_ledger_invariants_hold_for_any_operation_sequence(steps) -> None:
    ledger, _ = _ledger()
    state = _state()
    spent_before = state.total_spent

    for op, amount in steps:
        score_before = state.credit_score
        accepted = ledger.apply(state, LedgerEffect(op=op, amount=amount))
        assert state.account_balance >= 0
        assert state.total_saved >= 0
        assert state.total_spent >= spent_before
        spent_before = state.total_spent
        assert credit_score.MIN_SCORE <= state.credit_score <= credit_score.MAX_SCORE
        if accepted:
            assert state.credit_score == credit_score.compute_score(
                state.account_balance, state.total_saved, state.total_spent, state.goal_amount
            )
        else:
            assert state.credit_score == score_before


@given(
    st.integers(min_value=0, max_value=50_000),
    st.integers(min_value=0, max_value=50_000),
    st.integers(min_value=0, max_value=60_000),
)
def test_transfer_conserves_money(balance: int, saved: int, amount: int) -> None:
    ledger, _ = _ledger()
    state = _state(account_balance=balance, total_saved=saved)

    ledger.transfer_to_savings(state, amount)

    assert state.account_balance + state.total_saved == balance + saved
    assert state.total_spent == 0
