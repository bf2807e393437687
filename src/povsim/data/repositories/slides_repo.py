"""Repository for slide definitions."""
from __future__ import annotations

from typing import Dict, List

from povsim.data.errors import DataValidationError
from povsim.data.repositories.base import RepositoryBase
from povsim.domain.defs import (
    ActivateGoalEffect,
    ChoiceDef,
    CompleteMilestoneEffect,
    LedgerEffect,
    LedgerOp,
    RevealCreditScoreEffect,
    SetBalancesEffect,
    SetFlagEffect,
    SetPaycheckEffect,
    ShowPopupEffect,
    ShowTipEffect,
    SlideDef,
    SlideEffect,
    UnlockFactEffect,
)

_SLIDE_FIELDS = {
    "text",
    "background",
    "fact_title",
    "fact_text",
    "choices",
    "next",
    "on_enter",
    "opening",
    "title_screen",
}
_CHOICE_FIELDS = {"label", "subtitle", "next", "locked", "effect"}
_LEDGER_OPS = {op.value: op for op in LedgerOp}


class SlidesRepository(RepositoryBase[SlideDef]):
    """Loads slides and validates their structure."""

    def __init__(self, base_path=None) -> None:
        super().__init__("slides.json", base_path)

    def _build(self, raw: object) -> Dict[str, SlideDef]:
        mapping = self._require_mapping(raw, "slides.json")
        slides: Dict[str, SlideDef] = {}
        for slide_id, payload in mapping.items():
            if not slide_id:
                raise DataValidationError("Slide ids must be non-empty strings.")
            context = f"slide '{slide_id}'"
            slide_data = self._require_mapping(payload, context)
            unknown = set(slide_data) - _SLIDE_FIELDS
            if unknown:
                raise DataValidationError(f"{context} has unknown fields: {sorted(unknown)}")
            slides[slide_id] = SlideDef(
                id=slide_id,
                text=self._require_optional_str(slide_data.get("text"), f"{context} text") or "",
                background=self._require_optional_str(slide_data.get("background"), f"{context} background") or "",
                fact_title=self._require_optional_str(slide_data.get("fact_title"), f"{context} fact_title"),
                fact_text=self._require_optional_str(slide_data.get("fact_text"), f"{context} fact_text"),
                choices=tuple(self._parse_choices(slide_data.get("choices"), context)),
                next_slide_id=self._require_optional_str(slide_data.get("next"), f"{context} next"),
                on_enter=tuple(self._parse_entry_effects(slide_data.get("on_enter"), f"{context} on_enter")),
                opening=self._require_bool(slide_data.get("opening"), f"{context} opening"),
                title_screen=self._require_bool(slide_data.get("title_screen"), f"{context} title_screen"),
            )
        return slides

    def _parse_choices(self, raw_choices: object, context: str) -> List[ChoiceDef]:
        if raw_choices is None:
            return []
        choices: List[ChoiceDef] = []
        for index, entry in enumerate(self._require_list(raw_choices, f"{context} choices")):
            choice_ctx = f"{context} choices[{index}]"
            choice_data = self._require_mapping(entry, choice_ctx)
            unknown = set(choice_data) - _CHOICE_FIELDS
            if unknown:
                raise DataValidationError(f"{choice_ctx} has unknown fields: {sorted(unknown)}")
            effect = None
            if choice_data.get("effect") is not None:
                effect = self._parse_ledger_effect(choice_data["effect"], f"{choice_ctx} effect")
            choices.append(
                ChoiceDef(
                    label=self._require_str(choice_data.get("label"), f"{choice_ctx} label"),
                    subtitle=self._require_optional_str(choice_data.get("subtitle"), f"{choice_ctx} subtitle"),
                    next_slide_id=self._require_optional_str(choice_data.get("next"), f"{choice_ctx} next"),
                    locked=self._require_bool(choice_data.get("locked"), f"{choice_ctx} locked"),
                    effect=effect,
                )
            )
        return choices

    def _parse_ledger_effect(self, raw_effect: object, context: str) -> LedgerEffect:
        effect_data = self._require_mapping(raw_effect, context)
        effect_type = self._require_str(effect_data.get("type"), f"{context} type")
        op = _LEDGER_OPS.get(effect_type)
        if op is None:
            raise DataValidationError(f"{context} type '{effect_type}' is not a ledger effect.")
        return LedgerEffect(op=op, amount=effect_data.get("amount"))

    def _parse_entry_effects(self, raw_effects: object, context: str) -> List[SlideEffect]:
        if raw_effects is None:
            return []
        effects: List[SlideEffect] = []
        for index, entry in enumerate(self._require_list(raw_effects, context)):
            effect_ctx = f"{context}[{index}]"
            data = self._require_mapping(entry, effect_ctx)
            effect_type = self._require_str(data.get("type"), f"{effect_ctx} type")
            if effect_type in _LEDGER_OPS:
                effects.append(self._parse_ledger_effect(data, effect_ctx))
            elif effect_type == "unlock_fact":
                effects.append(UnlockFactEffect(fact_id=self._require_str(data.get("fact_id"), f"{effect_ctx} fact_id")))
            elif effect_type == "show_tip":
                effects.append(
                    ShowTipEffect(
                        fact_id=self._require_str(data.get("fact_id"), f"{effect_ctx} fact_id"),
                        title=self._require_optional_str(data.get("title"), f"{effect_ctx} title"),
                    )
                )
            elif effect_type == "complete_milestone":
                milestone = self._require_optional_int(data.get("milestone"), f"{effect_ctx} milestone")
                if milestone is None:
                    raise DataValidationError(f"{effect_ctx} milestone is required.")
                effects.append(CompleteMilestoneEffect(milestone=milestone))
            elif effect_type == "activate_goal":
                effects.append(ActivateGoalEffect())
            elif effect_type == "reveal_credit_score":
                effects.append(RevealCreditScoreEffect())
            elif effect_type == "set_flag":
                effects.append(
                    SetFlagEffect(
                        flag_id=self._require_str(data.get("flag_id"), f"{effect_ctx} flag_id"),
                        value=self._require_bool(data.get("value"), f"{effect_ctx} value", default=True),
                    )
                )
            elif effect_type == "set_balances":
                balance = data.get("balance")
                total_saved = data.get("total_saved")
                effects.append(
                    SetBalancesEffect(
                        balance=None if balance is None else self._require_number(balance, f"{effect_ctx} balance"),
                        total_saved=(
                            None
                            if total_saved is None
                            else self._require_number(total_saved, f"{effect_ctx} total_saved")
                        ),
                    )
                )
            elif effect_type == "set_paycheck":
                effects.append(
                    SetPaycheckEffect(
                        amount=self._require_non_negative_number(data.get("amount"), f"{effect_ctx} amount")
                    )
                )
            elif effect_type == "show_popup":
                effects.append(
                    ShowPopupEffect(
                        kind=self._require_str(data.get("kind"), f"{effect_ctx} kind"),
                        title=self._require_optional_str(data.get("title"), f"{effect_ctx} title"),
                        text=self._require_optional_str(data.get("text"), f"{effect_ctx} text"),
                        next_slide_id=self._require_optional_str(data.get("next"), f"{effect_ctx} next"),
                        unlock_fact=self._require_optional_str(data.get("unlock_fact"), f"{effect_ctx} unlock_fact"),
                    )
                )
            else:
                raise DataValidationError(f"{effect_ctx} has unknown effect type '{effect_type}'.")
        return effects
