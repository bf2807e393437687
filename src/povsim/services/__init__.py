"""Service layer exports."""

from .errors import ContentError, SlideNotFoundError
from .ledger_service import LedgerService, build_metrics_view, is_valid_amount
from .notifications import NotificationQueue
from .achievement_service import AchievementService
from .text_reveal import TextReveal
from .traversal_service import TraversalService, build_traversal_service

__all__ = [
    "ContentError",
    "SlideNotFoundError",
    "LedgerService",
    "build_metrics_view",
    "is_valid_amount",
    "NotificationQueue",
    "AchievementService",
    "TextReveal",
    "TraversalService",
    "build_traversal_service",
]
