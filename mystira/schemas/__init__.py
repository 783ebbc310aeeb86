"""
Pydantic models and validation for scenarios and game sessions
"""

from .scenario import (
    END_SCENE_ID,
    Branch,
    CompassChange,
    EchoLog,
    MediaReferences,
    Scenario,
    ScenarioCreateRequest,
    ScenarioSummary,
    Scene,
    SceneType,
)
from .session import (
    ACTIVE_STATUSES,
    AchievementType,
    CompassTracking,
    GameSession,
    GameSessionSummary,
    MakeChoiceRequest,
    ProgressSceneRequest,
    SelectCharacterRequest,
    SessionAchievement,
    SessionChoice,
    SessionStatsResponse,
    SessionStatus,
    StartSessionRequest,
)
from .validation import validate_scenario_document

__all__ = [
    # Scenario models
    "END_SCENE_ID",
    "Scenario",
    "Scene",
    "SceneType",
    "Branch",
    "EchoLog",
    "CompassChange",
    "MediaReferences",
    "ScenarioCreateRequest",
    "ScenarioSummary",
    # Session models
    "ACTIVE_STATUSES",
    "GameSession",
    "SessionStatus",
    "CompassTracking",
    "SessionChoice",
    "SessionAchievement",
    "AchievementType",
    "GameSessionSummary",
    "SessionStatsResponse",
    "StartSessionRequest",
    "MakeChoiceRequest",
    "ProgressSceneRequest",
    "SelectCharacterRequest",
    # Validation functions
    "validate_scenario_document",
]
