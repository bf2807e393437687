"""Slide traversal state machine."""
from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import List

from povsim.core.scheduler import Scheduler
from povsim.data.errors import DataReferenceError
from povsim.data.repositories import AchievementsRepository, GameConfigRepository, SlidesRepository
from povsim.domain.defs import (
    ActivateGoalEffect,
    ChoiceDef,
    CompleteMilestoneEffect,
    GameConfig,
    LedgerEffect,
    RevealCreditScoreEffect,
    SetBalancesEffect,
    SetFlagEffect,
    SetPaycheckEffect,
    ShowPopupEffect,
    ShowTipEffect,
    SlideDef,
    UnlockFactEffect,
)
from povsim.domain.state import GameState, PopupState, ScenePhase
from povsim.services.achievement_service import AchievementService
from povsim.services.errors import SlideNotFoundError
from povsim.services.ledger_service import LedgerService
from povsim.services.notifications import NotificationQueue
from povsim.services.sink import PresentationSink
from povsim.services.text_reveal import TextReveal
from povsim.services.views import (
    AchievementView,
    ChoiceView,
    CreditReportView,
    PopupView,
    SlideView,
    WalletView,
)

logger = logging.getLogger(__name__)


class TraversalService:
    """Walks the content table for one session.

    The service owns the session's ``GameState`` and is the only writer of
    the traversal cursor (current slide, phase, popup). Ledger and registry
    changes are delegated to their services with the same state object.
    Sink events map onto ``advance_phase``, ``select_choice`` and
    ``dismiss_popup``.
    """

    def __init__(
        self,
        slides_repo: SlidesRepository,
        achievements_repo: AchievementsRepository,
        sink: PresentationSink,
        config: GameConfig,
        *,
        scheduler: Scheduler | None = None,
    ) -> None:
        self._slides_repo = slides_repo
        self._sink = sink
        self._config = config
        self._scheduler = scheduler or Scheduler()
        self._ledger = LedgerService(sink)
        notifications = NotificationQueue(
            sink,
            self._scheduler,
            stagger=config.notification_stagger,
            duration=config.notification_duration,
            fade=config.notification_fade,
        )
        self._achievements = AchievementService(achievements_repo, notifications)
        self._reveal = TextReveal(self._scheduler, sink.render_dialogue_text, ms_per_char=config.typing_ms_per_char)
        self.state = GameState.from_config(config)

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def ledger(self) -> LedgerService:
        return self._ledger

    @property
    def achievements(self) -> AchievementService:
        return self._achievements

    @property
    def revealing(self) -> bool:
        return self._reveal.active

    def start(self) -> bool:
        """Show the metrics bar and enter the configured start slide."""
        self._ledger.refresh_metrics(self.state)
        return self.enter_slide(self._config.start_slide_id)

    def enter_slide(self, slide_id: str) -> bool:
        """Make ``slide_id`` current and render its first phase.

        Unknown ids leave the cursor on the last valid slide, record the
        error on the state and show it through the sink.
        """
        state = self.state
        try:
            slide = self._get_slide(slide_id)
        except SlideNotFoundError as exc:
            self._report_content_error(exc)
            return False

        self._close_popup()
        self._reveal.cancel()
        state.content_error = None
        state.current_slide_id = slide.id
        state.phase = ScenePhase.DIALOGUE
        logger.debug("Entering slide '%s'", slide.id)

        popup = self._apply_entry_effects(slide)
        self._ledger.refresh_metrics(state)
        self._sink.set_chrome_visible(not slide.opening)
        self._sink.render_background(slide.background)

        if popup is not None:
            self._open_popup(popup)
        elif slide.title_screen:
            state.phase = ScenePhase.CHOICES
            self._sink.render_choices(self._choice_views(slide))
        else:
            self._sink.render_dialogue_phase()
            self._reveal.start(slide.text)
        return True

    def advance_phase(self) -> bool:
        """Handle a continue action. Returns True if anything changed."""
        if self._reveal.reveal_now():
            return True
        state = self.state
        if state.popup is not None:
            logger.debug("Continue ignored while popup '%s' is open", state.popup.kind)
            return False
        slide = self._current_slide()
        if slide is None:
            return False

        if state.phase is ScenePhase.DIALOGUE:
            if slide.has_fact:
                state.phase = ScenePhase.FACT
                self._sink.render_fact(slide.fact_title, slide.fact_text or "")
                return True
            if slide.auto_advances:
                assert slide.next_slide_id is not None
                return self.enter_slide(slide.next_slide_id)
            self._show_choices(slide)
            return True
        if state.phase is ScenePhase.FACT:
            self._show_choices(slide)
            return True
        return False

    def select_choice(self, choice: int | ChoiceDef) -> bool:
        """Apply a choice and move to its successor.

        Locked or successor-less choices, out-of-range indexes, selections
        outside the choices phase and selections after a content error are
        ignored. A missing successor is reported before any effect applies.
        """
        state = self.state
        if state.content_error is not None:
            logger.debug("Choice ignored after content error")
            return False
        if state.popup is not None or state.phase is not ScenePhase.CHOICES:
            logger.debug("Choice ignored in phase %s", state.phase.name)
            return False
        slide = self._current_slide()
        if slide is None:
            return False
        if isinstance(choice, int):
            if not 0 <= choice < len(slide.choices):
                logger.debug("Choice index %s out of range for slide '%s'", choice, slide.id)
                return False
            choice = slide.choices[choice]
        if not choice.selectable:
            logger.debug("Choice '%s' on slide '%s' is not selectable", choice.label, slide.id)
            return False
        assert choice.next_slide_id is not None
        if not self._slides_repo.has(choice.next_slide_id):
            self._report_content_error(SlideNotFoundError(choice.next_slide_id))
            return False
        if choice.effect is not None:
            self._ledger.apply(state, choice.effect)
        return self.enter_slide(choice.next_slide_id)

    def dismiss_popup(self) -> bool:
        """Close the open popup and follow its pending successor, if any."""
        state = self.state
        popup = state.popup
        if popup is None:
            return False
        next_slide_id = self._close_popup()
        if next_slide_id:
            return self.enter_slide(next_slide_id)
        slide = self._current_slide()
        self._sink.render_dialogue_phase()
        self._reveal.start(slide.text if slide is not None else "")
        return True

    def current_view(self) -> SlideView:
        state = self.state
        slide = self._get_slide(state.current_slide_id)
        return SlideView(
            slide_id=slide.id,
            phase=state.phase,
            text=slide.text,
            background=slide.background,
            fact_title=slide.fact_title,
            fact_text=slide.fact_text,
            choices=self._choice_views(slide),
            popup_open=state.popup is not None,
        )

    def open_credit_report(self) -> CreditReportView | None:
        """Show the score breakdown. Nothing happens while the score is hidden."""
        if not self.state.credit_visible:
            return None
        report = self._ledger.credit_report(self.state)
        self._sink.show_credit_report(report)
        return report

    def open_wallet(self) -> WalletView:
        state = self.state
        background = (
            self._config.wallet_background_with_credit if state.credit_visible else self._config.wallet_background
        )
        wallet = WalletView(
            balance=state.account_balance,
            total_saved=state.total_saved,
            background=background,
            credit_card_active=state.credit_visible,
        )
        self._sink.show_wallet(wallet)
        return wallet

    def open_achievements(self) -> List[AchievementView]:
        entries = self._achievements.entries(self.state)
        self._sink.show_achievements(entries)
        return entries

    def _apply_entry_effects(self, slide: SlideDef) -> PopupState | None:
        state = self.state
        popup: PopupState | None = None
        for effect in slide.on_enter:
            if isinstance(effect, LedgerEffect):
                self._ledger.apply(state, effect)
            elif isinstance(effect, UnlockFactEffect):
                self._achievements.unlock(state, effect.fact_id)
            elif isinstance(effect, ShowTipEffect):
                self._achievements.show_tip(state, effect.fact_id, effect.title)
            elif isinstance(effect, CompleteMilestoneEffect):
                self._achievements.complete_milestone(state, effect.milestone)
            elif isinstance(effect, ActivateGoalEffect):
                state.goal_unlocked = True
                state.goal_active = True
            elif isinstance(effect, RevealCreditScoreEffect):
                state.credit_visible = True
            elif isinstance(effect, SetFlagEffect):
                state.flags[effect.flag_id] = effect.value
            elif isinstance(effect, SetBalancesEffect):
                self._ledger.set_balances(state, balance=effect.balance, total_saved=effect.total_saved)
            elif isinstance(effect, SetPaycheckEffect):
                state.current_paycheck_amount = effect.amount
            elif isinstance(effect, ShowPopupEffect):
                if effect.unlock_fact:
                    self._achievements.unlock(state, effect.unlock_fact)
                if popup is not None:
                    logger.warning("Slide '%s' requests more than one popup; keeping '%s'", slide.id, popup.kind)
                    continue
                popup = PopupState(
                    kind=effect.kind,
                    title=effect.title,
                    text=effect.text if effect.text is not None else slide.text,
                    next_slide_id=effect.next_slide_id or slide.next_slide_id,
                )
            else:
                raise TypeError(f"Unhandled slide effect: {effect!r}")
        return popup

    def _open_popup(self, popup: PopupState) -> None:
        state = self.state
        state.popup = popup
        if popup.next_slide_id:
            state.pending_popup_successors[popup.kind] = popup.next_slide_id
        else:
            state.pending_popup_successors.pop(popup.kind, None)
        self._sink.show_popup(PopupView(kind=popup.kind, title=popup.title, text=popup.text))

    def _close_popup(self) -> str | None:
        """Hide the open popup, returning the successor it was holding."""
        state = self.state
        popup = state.popup
        if popup is None:
            return None
        state.popup = None
        self._sink.hide_popup(popup.kind)
        return state.pending_popup_successors.pop(popup.kind, None)

    def _show_choices(self, slide: SlideDef) -> None:
        self.state.phase = ScenePhase.CHOICES
        self._sink.render_choices(self._choice_views(slide))

    def _report_content_error(self, exc: SlideNotFoundError) -> None:
        logger.error("Content error: %s", exc)
        self._reveal.cancel()
        self.state.content_error = str(exc)
        self._sink.render_error(f"Error: {exc}")
        self._sink.render_choices([])

    def _get_slide(self, slide_id: str) -> SlideDef:
        try:
            return self._slides_repo.get(slide_id)
        except KeyError as exc:
            raise SlideNotFoundError(slide_id) from exc

    def _current_slide(self) -> SlideDef | None:
        try:
            return self._get_slide(self.state.current_slide_id)
        except SlideNotFoundError as exc:
            logger.error("Content error: %s", exc)
            return None

    @staticmethod
    def _choice_views(slide: SlideDef) -> List[ChoiceView]:
        return [
            ChoiceView(label=choice.label, subtitle=choice.subtitle, locked=choice.locked, enabled=choice.selectable)
            for choice in slide.choices
        ]


def build_traversal_service(
    sink: PresentationSink,
    *,
    base_path: Path | str | None = None,
    scheduler: Scheduler | None = None,
    instant_text: bool = False,
) -> TraversalService:
    """Construct a TraversalService over the definitions in ``base_path``.

    ``instant_text`` turns the typewriter off so dialogue renders in one go.
    """
    slides_repo = SlidesRepository(base_path)
    achievements_repo = AchievementsRepository(base_path)
    config = GameConfigRepository(base_path).get_config()
    if not slides_repo.has(config.start_slide_id):
        raise DataReferenceError(f"game.start_slide_id references missing slide '{config.start_slide_id}'.")
    if instant_text:
        config = dataclasses.replace(config, typing_ms_per_char=0)
    return TraversalService(slides_repo, achievements_repo, sink, config, scheduler=scheduler)
