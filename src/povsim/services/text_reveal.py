"""Typewriter-style dialogue reveal."""
from __future__ import annotations

from typing import Callable, Iterator

from povsim.core.scheduler import ScheduledTask, Scheduler


def reveal_prefixes(text: str) -> Iterator[str]:
    """Yield successively longer prefixes of ``text``, ending with the full text."""
    for index in range(1, len(text)):
        yield text[:index]
    yield text


class TextReveal:
    """Owns the single live reveal task.

    ``start`` and ``reveal_now`` cancel whatever reveal was running, so at
    most one task is ever scheduled.
    """

    def __init__(self, scheduler: Scheduler, render: Callable[[str], None], *, ms_per_char: int = 35) -> None:
        self._scheduler = scheduler
        self._render = render
        self._interval = ms_per_char / 1000.0
        self._task: ScheduledTask | None = None
        self._prefixes: Iterator[str] | None = None
        self._full_text = ""

    @property
    def active(self) -> bool:
        return self._task is not None and self._task.active

    @property
    def full_text(self) -> str:
        return self._full_text

    def start(self, text: str) -> None:
        self.cancel()
        self._full_text = text
        self._render("")
        if not text:
            return
        if self._interval <= 0:
            self._render(text)
            return
        self._prefixes = reveal_prefixes(text)
        self._task = self._scheduler.call_later(self._interval, self._tick)

    def reveal_now(self) -> bool:
        """Finish a running reveal instantly. Returns False if nothing was running."""
        if not self.active:
            return False
        self.cancel()
        self._render(self._full_text)
        return True

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
        self._task = None
        self._prefixes = None

    def _tick(self) -> None:
        assert self._prefixes is not None
        prefix = next(self._prefixes, self._full_text)
        self._render(prefix)
        if prefix == self._full_text:
            self._task = None
            self._prefixes = None
            return
        self._task = self._scheduler.call_later(self._interval, self._tick)
