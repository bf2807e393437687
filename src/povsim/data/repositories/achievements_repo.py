"""Repository for achievement (tip) definitions."""
from __future__ import annotations

from typing import Dict

from povsim.data.errors import DataValidationError
from povsim.data.repositories.base import RepositoryBase
from povsim.domain.defs import AchievementDef


class AchievementsRepository(RepositoryBase[AchievementDef]):
    """Loads the ordered achievement registry."""

    def __init__(self, base_path=None) -> None:
        super().__init__("achievements.json", base_path)

    def _build(self, raw: object) -> Dict[str, AchievementDef]:
        entries = self._require_list(raw, "achievements.json")
        achievements: Dict[str, AchievementDef] = {}
        for index, entry in enumerate(entries):
            context = f"achievements[{index}]"
            data = self._require_mapping(entry, context)
            achievement_id = self._require_str(data.get("id"), f"{context} id")
            if achievement_id in achievements:
                raise DataValidationError(f"Duplicate achievement id '{achievement_id}'.")
            achievements[achievement_id] = AchievementDef(
                id=achievement_id,
                title=self._require_str(data.get("title"), f"{context} title"),
                description=self._require_str(data.get("description"), f"{context} description"),
                milestone=self._require_optional_int(data.get("milestone"), f"{context} milestone"),
            )
        return achievements
