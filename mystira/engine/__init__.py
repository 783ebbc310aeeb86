"""
Session playback engine and scenario validation
"""

from .achievements import AchievementEvaluator, DefaultThresholdProvider, ThresholdProvider
from .compass import CompassTracker
from .scenarios import ScenarioService
from .sessions import GameSessionService
from .validator import ScenarioValidator

__all__ = [
    "AchievementEvaluator",
    "CompassTracker",
    "DefaultThresholdProvider",
    "GameSessionService",
    "ScenarioService",
    "ScenarioValidator",
    "ThresholdProvider",
]
