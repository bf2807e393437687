"""Repository exports."""

from .achievements_repo import AchievementsRepository
from .game_config_repo import GameConfigRepository
from .slides_repo import SlidesRepository

__all__ = [
    "AchievementsRepository",
    "GameConfigRepository",
    "SlidesRepository",
]
