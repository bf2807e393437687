"""Unlockable tips and milestone bookkeeping."""
from __future__ import annotations

import logging
from typing import List

from povsim.data.repositories import AchievementsRepository
from povsim.domain.defs import AchievementDef
from povsim.domain.state import GameState
from povsim.services.notifications import NotificationQueue
from povsim.services.views import AchievementView

logger = logging.getLogger(__name__)

TIP_PREFIX = "Tip: "


class AchievementService:
    """Tracks which registry entries a session has unlocked.

    Definitions are shared and read-only; unlock status lives in
    ``GameState.unlocked_facts`` so sessions stay independent.
    """

    def __init__(self, achievements_repo: AchievementsRepository, notifications: NotificationQueue) -> None:
        self._achievements_repo = achievements_repo
        self._notifications = notifications

    def unlock(self, state: GameState, achievement_id: str) -> bool:
        """Unlock an entry. Returns True only on the first unlock of a known id."""
        if not self._achievements_repo.has(achievement_id):
            logger.debug("Ignoring unlock of unknown achievement '%s'", achievement_id)
            return False
        if achievement_id in state.unlocked_facts:
            return False
        state.unlocked_facts.append(achievement_id)
        return True

    def show_tip(self, state: GameState, achievement_id: str, title: str | None = None) -> None:
        """Unlock an entry and flash its title straight away."""
        self.unlock(state, achievement_id)
        if title is None:
            if not self._achievements_repo.has(achievement_id):
                return
            title = self._achievements_repo.get(achievement_id).title
        self._notifications.post(f"{TIP_PREFIX}{title}")

    def complete_milestone(self, state: GameState, milestone: int) -> List[AchievementDef]:
        """Record a milestone and unlock everything it triggers, once."""
        if milestone in state.completed_milestones:
            logger.info("Milestone %s already completed", milestone)
            return []
        state.completed_milestones.append(milestone)
        logger.info("Milestone %s completed", milestone)

        newly_unlocked = [
            achievement
            for achievement in self._achievements_repo.all()
            if achievement.milestone == milestone and self.unlock(state, achievement.id)
        ]
        self._notifications.post_batch([f"{TIP_PREFIX}{achievement.title}" for achievement in newly_unlocked])
        return newly_unlocked

    def entries(self, state: GameState) -> List[AchievementView]:
        views: List[AchievementView] = []
        for achievement in self._achievements_repo.all():
            unlocked = achievement.id in state.unlocked_facts
            views.append(
                AchievementView(
                    id=achievement.id,
                    title=achievement.title,
                    description=achievement.description if unlocked else None,
                    unlocked=unlocked,
                )
            )
        return views
