"""Achievement (tip) definition data structures."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AchievementDef:
    """An unlockable tip shown in the info panel."""

    id: str
    title: str
    description: str
    milestone: int | None = None
