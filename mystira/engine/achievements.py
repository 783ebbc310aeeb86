"""
Achievement evaluation.

Achievements are derived from session state with deterministic ids, so
evaluating the same state twice never yields a badge the session already has.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from mystira.config import settings
from mystira.schemas.session import (
    AchievementType,
    GameSession,
    SessionAchievement,
    SessionStatus,
)
from mystira.utils.clock import utc_now
from mystira.utils.logger import get_logger

logger = get_logger(__name__)


class ThresholdProvider(ABC):
    """Looks up the compass threshold that earns an axis badge"""

    @abstractmethod
    def threshold_for(self, axis: str, age_group: Optional[str] = None) -> float:
        pass


class DefaultThresholdProvider(ThresholdProvider):
    """Single global threshold with optional per-axis overrides"""

    def __init__(
        self,
        default_threshold: Optional[float] = None,
        overrides: Optional[Dict[str, float]] = None,
    ):
        self.default_threshold = (
            settings.achievement_threshold
            if default_threshold is None
            else default_threshold
        )
        self.overrides = dict(overrides or {})

    def threshold_for(self, axis: str, age_group: Optional[str] = None) -> float:
        return self.overrides.get(axis, self.default_threshold)


def title_case(value: str) -> str:
    """'self_control' -> 'Self Control'"""
    words = value.replace("-", " ").replace("_", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


class AchievementEvaluator:
    """Derives new achievements from a session without modifying it"""

    def __init__(self, thresholds: Optional[ThresholdProvider] = None):
        self.thresholds = thresholds or DefaultThresholdProvider()

    def evaluate(
        self, session: GameSession, now: Optional[datetime] = None
    ) -> List[SessionAchievement]:
        now = now or utc_now()
        achievements: List[SessionAchievement] = []

        for tracking in session.compass_values.values():
            threshold = self.thresholds.threshold_for(
                tracking.axis, session.target_age_group
            )
            if abs(tracking.current_value) < threshold:
                continue

            achievement_id = f"{session.id}_{tracking.axis}_threshold"
            if not session.has_achievement(achievement_id):
                achievements.append(
                    SessionAchievement(
                        id=achievement_id,
                        title=f"{title_case(tracking.axis)} Badge",
                        description=f"Reached {tracking.axis} threshold of {threshold}",
                        icon_name=f"badge_{tracking.axis}",
                        type=AchievementType.COMPASS_THRESHOLD,
                        compass_axis=tracking.axis,
                        threshold_value=threshold,
                        earned_at=now,
                    )
                )

        # Exactly one choice, not "at least one"
        if len(session.choice_history) == 1:
            first_choice_id = f"{session.id}_first_choice"
            if not session.has_achievement(first_choice_id):
                achievements.append(
                    SessionAchievement(
                        id=first_choice_id,
                        title="First Steps",
                        description="Made your first choice in the adventure",
                        icon_name="badge_first_choice",
                        type=AchievementType.FIRST_CHOICE,
                        earned_at=now,
                    )
                )

        if session.status == SessionStatus.COMPLETED:
            completion_id = f"{session.id}_completion"
            if not session.has_achievement(completion_id):
                achievements.append(
                    SessionAchievement(
                        id=completion_id,
                        title="Adventure Complete",
                        description="Successfully completed the adventure",
                        icon_name="badge_completion",
                        type=AchievementType.SESSION_COMPLETE,
                        earned_at=now,
                    )
                )

        if achievements:
            logger.debug(
                f"Session {session.id} qualifies for {len(achievements)} new achievement(s)"
            )
        return achievements


def merge_achievements(
    session: GameSession, candidates: List[SessionAchievement]
) -> List[SessionAchievement]:
    """Append candidates whose id is not yet present; returns the ones added"""
    added = []
    for achievement in candidates:
        if not session.has_achievement(achievement.id):
            session.achievements.append(achievement)
            added.append(achievement)
    return added
