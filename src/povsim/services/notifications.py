"""Self-expiring notification banners."""
from __future__ import annotations

import itertools
from typing import List, Sequence

from povsim.core.scheduler import Scheduler
from povsim.services.sink import PresentationSink
from povsim.services.views import Notification


class NotificationQueue:
    """Posts banners onto the sink and takes them down again.

    Each banner is shown, hidden after ``duration`` seconds and removed
    ``fade`` seconds later. Nothing is cancellable once posted.
    """

    def __init__(
        self,
        sink: PresentationSink,
        scheduler: Scheduler,
        *,
        stagger: float = 0.5,
        duration: float = 3.0,
        fade: float = 0.3,
    ) -> None:
        self._sink = sink
        self._scheduler = scheduler
        self._stagger = stagger
        self._duration = duration
        self._fade = fade
        self._ids = itertools.count(1)

    def post(self, text: str, delay: float = 0.0) -> Notification:
        notification = Notification(notification_id=next(self._ids), text=text)
        if delay <= 0:
            self._show(notification)
        else:
            self._scheduler.call_later(delay, lambda: self._show(notification))
        return notification

    def post_batch(self, texts: Sequence[str]) -> List[Notification]:
        """Post several banners one ``stagger`` apart, in order."""
        return [self.post(text, delay=index * self._stagger) for index, text in enumerate(texts)]

    def _show(self, notification: Notification) -> None:
        self._sink.show_notification(notification)
        self._scheduler.call_later(self._duration, lambda: self._hide(notification))

    def _hide(self, notification: Notification) -> None:
        self._sink.hide_notification(notification)
        self._scheduler.call_later(self._fade, lambda: self._sink.remove_notification(notification))
