"""Boundary between the engine and whatever draws it."""
from __future__ import annotations

from typing import Protocol, Sequence

from povsim.core.types import FlashDirection
from povsim.services.views import (
    AchievementView,
    ChoiceView,
    CreditReportView,
    MetricsView,
    Notification,
    PopupView,
    WalletView,
)


class PresentationSink(Protocol):
    """Rendering commands the engine issues. Implementations must not call back synchronously."""

    def render_background(self, ref: str) -> None: ...

    def render_dialogue_phase(self) -> None: ...

    def render_dialogue_text(self, text: str) -> None: ...

    def render_fact(self, title: str | None, text: str) -> None: ...

    def render_choices(self, choices: Sequence[ChoiceView]) -> None: ...

    def render_error(self, message: str) -> None: ...

    def flash_balance(self, direction: FlashDirection) -> None: ...

    def flash_goal(self, direction: FlashDirection) -> None: ...

    def update_metrics(self, view: MetricsView) -> None: ...

    def set_chrome_visible(self, visible: bool) -> None: ...

    def show_popup(self, popup: PopupView) -> None: ...

    def hide_popup(self, kind: str) -> None: ...

    def show_notification(self, notification: Notification) -> None: ...

    def hide_notification(self, notification: Notification) -> None: ...

    def remove_notification(self, notification: Notification) -> None: ...

    def show_credit_report(self, report: CreditReportView) -> None: ...

    def show_wallet(self, wallet: WalletView) -> None: ...

    def show_achievements(self, entries: Sequence[AchievementView]) -> None: ...
