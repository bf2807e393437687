"""Console-driven UI loop for the poverty simulator."""
from __future__ import annotations

import logging
import time
from typing import Sequence

from povsim.core.types import FlashDirection, TextDisplayMode
from povsim.data.errors import DataError
from povsim.domain.state import ScenePhase
from povsim.presentation.cli.config import load_config, save_config
from povsim.presentation.cli.render import (
    debug_enabled,
    format_metrics,
    get_text_display_mode,
    render_achievements,
    render_choices,
    render_credit_report,
    render_fact,
    render_heading,
    render_popup,
    render_wallet,
    set_text_display_mode,
)
from povsim.services import ContentError, TraversalService, build_traversal_service
from povsim.services.views import (
    AchievementView,
    ChoiceView,
    CreditReportView,
    MetricsView,
    Notification,
    PopupView,
    WalletView,
)

logger = logging.getLogger(__name__)

_HELP_LINES = (
    "Enter  continue / dismiss",
    "1-9    pick a choice",
    "c      credit report",
    "w      wallet",
    "t      financial tips",
    "o      toggle text display mode",
    "q      quit",
)
_FLASH_MARKERS = {"credit": "+", "debit": "-"}


def configure_logging() -> None:
    """Send engine logs to stderr; DEBUG only when POVSIM_DEBUG=1."""
    level = logging.DEBUG if debug_enabled() else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


class ConsoleSink:
    """Prints engine commands to stdout.

    Dialogue text arrives as growing prefixes; only the unseen tail is
    printed so the typewriter effect works on a plain terminal.
    """

    def __init__(self) -> None:
        self._chrome_visible = False
        self._metrics: MetricsView | None = None
        self._metrics_dirty = False
        self._flash: FlashDirection | None = None
        self._dialogue = ""
        self._dialogue_open = False

    def render_background(self, ref: str) -> None:
        if debug_enabled():
            print(f"[background {ref}]")

    def render_dialogue_phase(self) -> None:
        self._flush_metrics()
        print()

    def render_dialogue_text(self, text: str) -> None:
        if not text:
            self._dialogue = ""
            return
        if text.startswith(self._dialogue):
            print(text[len(self._dialogue):], end="", flush=True)
        else:
            print(f"\n{text}", end="", flush=True)
        self._dialogue = text
        self._dialogue_open = True

    def end_dialogue_line(self) -> None:
        if self._dialogue_open:
            print()
            self._dialogue_open = False

    def render_fact(self, title: str | None, text: str) -> None:
        self.end_dialogue_line()
        render_fact(title, text)

    def render_choices(self, choices: Sequence[ChoiceView]) -> None:
        self.end_dialogue_line()
        self._flush_metrics()
        render_choices(choices)

    def render_error(self, message: str) -> None:
        self.end_dialogue_line()
        print(message)

    def flash_balance(self, direction: FlashDirection) -> None:
        self._flash = direction

    def flash_goal(self, direction: FlashDirection) -> None:
        logger.debug("Goal meter flash: %s", direction)

    def update_metrics(self, view: MetricsView) -> None:
        if view != self._metrics:
            self._metrics = view
            self._metrics_dirty = True

    def set_chrome_visible(self, visible: bool) -> None:
        if visible and not self._chrome_visible:
            self._metrics_dirty = True
        self._chrome_visible = visible

    def show_popup(self, popup: PopupView) -> None:
        self.end_dialogue_line()
        self._flush_metrics()
        render_popup(popup)

    def hide_popup(self, kind: str) -> None:
        logger.debug("Popup '%s' closed", kind)

    def show_notification(self, notification: Notification) -> None:
        self.end_dialogue_line()
        print(f"  * {notification.text}")

    def hide_notification(self, notification: Notification) -> None:
        logger.debug("Notification %s hidden", notification.notification_id)

    def remove_notification(self, notification: Notification) -> None:
        logger.debug("Notification %s removed", notification.notification_id)

    def show_credit_report(self, report: CreditReportView) -> None:
        render_credit_report(report)

    def show_wallet(self, wallet: WalletView) -> None:
        render_wallet(wallet)

    def show_achievements(self, entries: Sequence[AchievementView]) -> None:
        render_achievements(entries)

    def _flush_metrics(self) -> None:
        if not (self._chrome_visible and self._metrics_dirty and self._metrics is not None):
            return
        marker = f" {_FLASH_MARKERS[self._flash]}" if self._flash else ""
        print(f"[{format_metrics(self._metrics)}]{marker}")
        self._metrics_dirty = False
        self._flash = None


def main() -> None:
    """Start the interactive CLI session."""
    configure_logging()
    user_config = load_config()
    set_text_display_mode(user_config["text_display_mode"])  # type: ignore[arg-type]
    sink = ConsoleSink()
    try:
        service = build_traversal_service(sink, instant_text=get_text_display_mode() == "instant")
    except DataError as exc:
        print(f"Unable to load game content: {exc}")
        raise SystemExit(1) from exc
    print("=== Poverty Simulator ===")
    print("Type 'h' for controls.")
    service.start()
    _run_loop(service, sink)
    print("Goodbye!")


def _run_loop(service: TraversalService, sink: ConsoleSink) -> None:
    clock = time.monotonic()
    while True:
        _play_reveal(service, sink)
        if _is_finished(service):
            print("\n--- The End (for now) ---")
            return
        try:
            raw = input(_prompt_for(service)).strip().lower()
        except EOFError:
            return
        now = time.monotonic()
        service.scheduler.advance(now - clock)
        clock = now
        if raw == "q":
            return
        _handle_command(service, raw)


def _handle_command(service: TraversalService, raw: str) -> None:
    state = service.state
    if raw == "h":
        render_heading("Controls")
        for line in _HELP_LINES:
            print(line)
    elif raw == "c":
        if service.open_credit_report() is None:
            print("Your credit score hasn't been revealed yet.")
    elif raw == "w":
        service.open_wallet()
    elif raw == "t":
        service.open_achievements()
    elif raw == "o":
        _toggle_text_mode()
    elif state.popup is not None:
        service.dismiss_popup()
    elif raw == "":
        service.advance_phase()
    elif raw.isdigit():
        if not service.select_choice(int(raw) - 1):
            print("That option is not available.")
    else:
        print("Unknown command. Type 'h' for controls.")


def _toggle_text_mode() -> None:
    mode: TextDisplayMode = "instant" if get_text_display_mode() == "step" else "step"
    set_text_display_mode(mode)
    save_config({"text_display_mode": mode})
    print(f"Text display mode: {mode} (applies next session)")


def _play_reveal(service: TraversalService, sink: ConsoleSink) -> None:
    """Run the typewriter in real time until the current text is complete."""
    scheduler = service.scheduler
    while service.revealing:
        due = scheduler.next_due()
        if due is None:
            break
        delay = due - scheduler.now
        if delay > 0:
            time.sleep(delay)
        scheduler.advance(delay)
    sink.end_dialogue_line()


def _is_finished(service: TraversalService) -> bool:
    state = service.state
    if state.popup is not None or state.phase is not ScenePhase.CHOICES:
        return False
    try:
        view = service.current_view()
    except ContentError:
        return False
    return not view.choices


def _prompt_for(service: TraversalService) -> str:
    state = service.state
    if state.popup is not None:
        return "\n(Enter to dismiss) > "
    if state.phase is ScenePhase.CHOICES:
        return "\nChoose: "
    if debug_enabled():
        return f"\n[{state.current_slide_id}] (Enter) > "
    return "\n(Enter) > "
