"""Shared CLI rendering helpers."""
from __future__ import annotations

import os
import textwrap
from typing import Iterable, Sequence

from povsim.core.types import TextDisplayMode
from povsim.services.views import AchievementView, ChoiceView, CreditReportView, MetricsView, PopupView, WalletView

BOX_WIDTH = 72
_text_display_mode: TextDisplayMode = "instant"


def debug_enabled() -> bool:
    """Return True only when POVSIM_DEBUG is explicitly set to '1'."""
    return os.getenv("POVSIM_DEBUG") == "1"


def set_text_display_mode(mode: TextDisplayMode) -> None:
    global _text_display_mode
    _text_display_mode = "step" if mode == "step" else "instant"


def get_text_display_mode() -> TextDisplayMode:
    return _text_display_mode


def format_money(amount: int | float) -> str:
    """Format a dollar amount with thousands separators, dropping zero cents."""
    if float(amount).is_integer():
        return f"${int(amount):,}"
    return f"${amount:,.2f}"


def wrap_text_for_box(text: str, width: int, *, indent_continuation: bool = True) -> list[str]:
    """
    Wrap text to fit within a fixed width, breaking on word boundaries.

    Args:
        text: The text to wrap
        width: Maximum width per line
        indent_continuation: If True, indent continuation lines with 2 spaces

    Returns:
        List of wrapped lines, each <= width characters
    """
    if not text or width <= 0:
        return [text] if text else [""]

    prefix = "- " if text.startswith("- ") else ""
    content = text[len(prefix):]
    wrapped = textwrap.wrap(
        content,
        width=width - len(prefix),
        subsequent_indent="  " if indent_continuation and not prefix else "",
        break_long_words=False,
        break_on_hyphens=False,
    )
    if not wrapped:
        return [prefix.rstrip()]
    lines = [prefix + wrapped[0]]
    continuation = "  " if prefix and indent_continuation else ""
    lines.extend(continuation + line for line in wrapped[1:])
    return lines


def wrap_paragraphs(text: str, width: int = BOX_WIDTH) -> list[str]:
    """Wrap each paragraph separately, keeping blank lines between them."""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        if not paragraph.strip():
            lines.append("")
            continue
        lines.extend(wrap_text_for_box(paragraph, width, indent_continuation=False))
    return lines


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_boxed_panel(title: str, lines: Iterable[str], width: int = BOX_WIDTH) -> None:
    """Print lines inside an ASCII box with a title bar."""
    inner = width - 4
    border = "+" + "-" * (width - 2) + "+"
    print(border)
    print(f"| {title[:inner]:<{inner}} |")
    print(border)
    for line in lines:
        for wrapped in wrap_text_for_box(line, inner):
            print(f"| {wrapped:<{inner}} |")
    print(border)


def format_metrics(view: MetricsView) -> str:
    parts = [f"Balance {format_money(view.balance)}"]
    if view.goal_active:
        parts.append(
            f"Car fund {format_money(view.total_saved)} / {format_money(view.goal_amount)}"
            f" ({view.goal_progress_percent}%)"
        )
    if view.credit_visible:
        parts.append(f"Credit {view.credit_score}")
    return " | ".join(parts)


def format_choice(index: int, choice: ChoiceView) -> str:
    label = f"{index}. {choice.label}"
    if choice.subtitle:
        label += f" ({choice.subtitle})"
    if choice.locked:
        label += " [locked]"
    return label


def render_choices(choices: Sequence[ChoiceView]) -> None:
    """Display numbered choices; locked ones stay visible."""
    if not choices:
        return
    render_heading("Choices")
    for idx, choice in enumerate(choices, start=1):
        print(format_choice(idx, choice))


def render_fact(title: str | None, text: str) -> None:
    render_boxed_panel(title or "Did you know?", wrap_paragraphs(text, BOX_WIDTH - 4))


def render_popup(popup: PopupView) -> None:
    render_boxed_panel(popup.title or popup.kind.replace("_", " ").title(), wrap_paragraphs(popup.text, BOX_WIDTH - 4))
    print("(Press Enter to continue)")


def render_credit_report(report: CreditReportView) -> None:
    lines = [f"Score: {report.score} ({report.rating})", ""]
    lines.extend(f"- {explanation}" for explanation in report.explanations)
    render_boxed_panel("Credit Report", lines)


def render_wallet(wallet: WalletView) -> None:
    lines = [
        f"Checking: {format_money(wallet.balance)}",
        f"Savings: {format_money(wallet.total_saved)}",
        f"Credit card: {'active' if wallet.credit_card_active else 'none'}",
    ]
    if debug_enabled():
        lines.append(f"[background {wallet.background}]")
    render_boxed_panel("Wallet", lines)


def render_achievements(entries: Sequence[AchievementView]) -> None:
    lines: list[str] = []
    for entry in entries:
        if entry.unlocked:
            lines.append(f"- {entry.title}: {entry.description}")
        else:
            lines.append(f"- {entry.title} [locked]")
    render_boxed_panel("Financial Tips", lines or ["No tips yet."])
