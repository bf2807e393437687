"""Domain definition exports."""

from .achievement_def import AchievementDef
from .game_config_def import GameConfig
from .slide_def import (
    ActivateGoalEffect,
    ChoiceDef,
    CompleteMilestoneEffect,
    LedgerEffect,
    LedgerOp,
    RevealCreditScoreEffect,
    SetBalancesEffect,
    SetFlagEffect,
    SetPaycheckEffect,
    ShowPopupEffect,
    ShowTipEffect,
    SlideDef,
    SlideEffect,
    UnlockFactEffect,
)

__all__ = [
    "AchievementDef",
    "ActivateGoalEffect",
    "ChoiceDef",
    "CompleteMilestoneEffect",
    "GameConfig",
    "LedgerEffect",
    "LedgerOp",
    "RevealCreditScoreEffect",
    "SetBalancesEffect",
    "SetFlagEffect",
    "SetPaycheckEffect",
    "ShowPopupEffect",
    "ShowTipEffect",
    "SlideDef",
    "SlideEffect",
    "UnlockFactEffect",
]
