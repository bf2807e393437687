"""Repository for session configuration."""
from __future__ import annotations

from typing import Dict

from povsim.data.errors import DataValidationError
from povsim.data.repositories.base import RepositoryBase
from povsim.domain.defs import GameConfig

_TIMING_FIELDS = ("notification_stagger", "notification_duration", "notification_fade")


class GameConfigRepository(RepositoryBase[GameConfig]):
    """Loads the constants a new session starts from."""

    def __init__(self, base_path=None) -> None:
        super().__init__("game.json", base_path)

    def _build(self, raw: object) -> Dict[str, GameConfig]:
        data = self._require_mapping(raw, "game.json")
        start_slide_id = self._require_str(data.get("start_slide_id"), "game.start_slide_id")
        if not start_slide_id:
            raise DataValidationError("game.start_slide_id must not be empty.")
        initial_state = self._require_mapping(data.get("initial_state", {}), "game.initial_state")
        timing = self._require_mapping(data.get("timing", {}), "game.timing")
        wallet = self._require_mapping(data.get("wallet", {}), "game.wallet")

        defaults = GameConfig(start_slide_id=start_slide_id)
        score = self._require_optional_int(initial_state.get("credit_score"), "game.initial_state.credit_score")
        typing = self._require_optional_int(timing.get("typing_ms_per_char"), "game.timing.typing_ms_per_char")
        if typing is not None and typing < 0:
            raise DataValidationError("game.timing.typing_ms_per_char must be non-negative.")
        timings = {
            name: float(self._require_non_negative_number(timing[name], f"game.timing.{name}"))
            for name in _TIMING_FIELDS
            if name in timing
        }
        config = GameConfig(
            start_slide_id=start_slide_id,
            initial_balance=self._number_or_default(
                initial_state, "balance", defaults.initial_balance, "game.initial_state.balance"
            ),
            goal_amount=self._number_or_default(
                initial_state, "goal_amount", defaults.goal_amount, "game.initial_state.goal_amount"
            ),
            initial_credit_score=defaults.initial_credit_score if score is None else score,
            paycheck_amount=self._number_or_default(
                initial_state, "paycheck_amount", defaults.paycheck_amount, "game.initial_state.paycheck_amount"
            ),
            typing_ms_per_char=defaults.typing_ms_per_char if typing is None else typing,
            notification_stagger=timings.get("notification_stagger", defaults.notification_stagger),
            notification_duration=timings.get("notification_duration", defaults.notification_duration),
            notification_fade=timings.get("notification_fade", defaults.notification_fade),
            wallet_background=self._require_optional_str(wallet.get("background"), "game.wallet.background") or "",
            wallet_background_with_credit=self._require_optional_str(
                wallet.get("background_with_credit"), "game.wallet.background_with_credit"
            )
            or "",
        )
        return {"game": config}

    def get_config(self) -> GameConfig:
        self._ensure_loaded()
        assert self._definitions is not None
        return self._definitions["game"]

    def _number_or_default(
        self, data: dict[str, object], key: str, default: int | float, context: str
    ) -> int | float:
        if key not in data:
            return default
        return self._require_non_negative_number(data[key], context)
