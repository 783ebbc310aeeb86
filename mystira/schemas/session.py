"""
Game session schema definitions.

A GameSession is one playthrough of a scenario. It owns its compass
trackers, its choice and echo history and its earned achievements.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from mystira.schemas.scenario import CompassChange, EchoLog
from mystira.utils.clock import utc_now


class SessionStatus(str, Enum):
    """Lifecycle states of a session"""

    IN_PROGRESS = "InProgress"
    PAUSED = "Paused"
    COMPLETED = "Completed"


ACTIVE_STATUSES = (SessionStatus.IN_PROGRESS, SessionStatus.PAUSED)


class AchievementType(str, Enum):
    """What triggered an achievement"""

    COMPASS_THRESHOLD = "CompassThreshold"
    FIRST_CHOICE = "FirstChoice"
    SESSION_COMPLETE = "SessionComplete"


class CompassTracking(BaseModel):
    """Bounded per-axis accumulator with its append-only change log"""

    axis: str
    current_value: float = 0.0
    starting_value: float = 0.0
    history: List[CompassChange] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=utc_now)


class SessionChoice(BaseModel):
    """Audit record of one choice; the scene title is a snapshot"""

    scene_id: str
    scene_title: str
    choice_text: str
    next_scene_id: str
    chosen_at: datetime = Field(default_factory=utc_now)
    echo_generated: Optional[EchoLog] = None
    compass_change: Optional[CompassChange] = None


class SessionAchievement(BaseModel):
    """An achievement earned inside a session"""

    id: str
    title: str
    description: str = ""
    icon_name: str = ""
    type: AchievementType
    compass_axis: Optional[str] = None
    threshold_value: Optional[float] = None
    earned_at: datetime = Field(default_factory=utc_now)


class GameSession(BaseModel):
    """One playthrough instance of a scenario"""

    id: str
    scenario_id: str
    account_id: str = ""
    profile_id: str = ""
    player_names: List[str] = Field(default_factory=list)
    status: SessionStatus = SessionStatus.IN_PROGRESS
    current_scene_id: str = ""
    start_time: datetime = Field(default_factory=utc_now)
    end_time: Optional[datetime] = None
    elapsed_time: timedelta = Field(default_factory=timedelta)
    is_paused: bool = False
    paused_at: Optional[datetime] = None
    target_age_group: str = ""
    scene_count: int = 0
    selected_character_id: Optional[str] = None
    compass_values: Dict[str, CompassTracking] = Field(default_factory=dict)
    choice_history: List[SessionChoice] = Field(default_factory=list)
    echo_history: List[EchoLog] = Field(default_factory=list)
    achievements: List[SessionAchievement] = Field(default_factory=list)
    version: int = Field(default=0, description="Incremented on every write")

    def has_achievement(self, achievement_id: str) -> bool:
        return any(a.id == achievement_id for a in self.achievements)

    def total_elapsed_time(self, now: Optional[datetime] = None) -> timedelta:
        """Recorded elapsed time plus the stretch still running"""
        now = now or utc_now()
        total = self.elapsed_time
        if self.is_paused and self.paused_at is not None:
            total += now - self.paused_at
        elif self.status == SessionStatus.IN_PROGRESS:
            total += now - self.start_time
        return total


class StartSessionRequest(BaseModel):
    """Request to start a new session"""

    scenario_id: str
    account_id: str = ""
    profile_id: str = ""
    player_names: List[str] = Field(default_factory=list)
    target_age_group: str = ""


class MakeChoiceRequest(BaseModel):
    """Request to take a branch in the current scene"""

    session_id: str
    scene_id: str
    choice_text: str
    next_scene_id: str = ""


class ProgressSceneRequest(BaseModel):
    """Request to move a session to a scene without recording a choice"""

    scene_id: str


class SelectCharacterRequest(BaseModel):
    """Request to select a character for a session"""

    character_id: str


class GameSessionSummary(BaseModel):
    """Compact view of a session used in listings"""

    id: str
    scenario_id: str
    account_id: str
    profile_id: str
    player_names: List[str]
    status: SessionStatus
    current_scene_id: str
    choice_count: int
    echo_count: int
    achievement_count: int
    start_time: datetime
    end_time: Optional[datetime] = None
    elapsed_time: timedelta
    is_paused: bool
    scene_count: int
    target_age_group: str

    @classmethod
    def from_session(cls, session: GameSession) -> "GameSessionSummary":
        return cls(
            id=session.id,
            scenario_id=session.scenario_id,
            account_id=session.account_id,
            profile_id=session.profile_id,
            player_names=list(session.player_names),
            status=session.status,
            current_scene_id=session.current_scene_id,
            choice_count=len(session.choice_history),
            echo_count=len(session.echo_history),
            achievement_count=len(session.achievements),
            start_time=session.start_time,
            end_time=session.end_time,
            elapsed_time=session.elapsed_time,
            is_paused=session.is_paused,
            scene_count=session.scene_count,
            target_age_group=session.target_age_group,
        )


class SessionStatsResponse(BaseModel):
    """Aggregated statistics for a session"""

    compass_values: Dict[str, float]
    recent_echoes: List[EchoLog]
    achievements: List[SessionAchievement]
    total_choices: int
    session_duration: timedelta
