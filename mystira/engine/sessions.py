"""
Game session lifecycle engine.

This module handles starting sessions, applying choices, pause/resume/end
transitions and scene progression. Each operation reads the session,
mutates it in memory and writes it back with a version check.
"""

import uuid
from datetime import datetime
from typing import Callable, List, Optional

from mystira.config import settings
from mystira.db.manager import DatabaseManager
from mystira.engine.achievements import AchievementEvaluator, merge_achievements
from mystira.engine.compass import CompassTracker
from mystira.engine.scenarios import ScenarioService
from mystira.errors import InvalidStateError, NotFoundError, ValidationError
from mystira.schemas.master_data import is_age_group_compatible
from mystira.schemas.scenario import EchoLog
from mystira.schemas.session import (
    GameSession,
    GameSessionSummary,
    MakeChoiceRequest,
    SessionAchievement,
    SessionChoice,
    SessionStatsResponse,
    SessionStatus,
    StartSessionRequest,
)
from mystira.utils.clock import utc_now
from mystira.utils.logger import get_logger

logger = get_logger(__name__)


class GameSessionService:
    """
    Drives sessions through their lifecycle.

    Attributes:
        db: Session store
        scenarios: Scenario lookup
        compass: Per-axis tracker bookkeeping
        evaluator: Achievement derivation
        clock: Source of "now", replaceable in tests
    """

    def __init__(
        self,
        db: DatabaseManager,
        scenarios: Optional[ScenarioService] = None,
        compass: Optional[CompassTracker] = None,
        evaluator: Optional[AchievementEvaluator] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.scenarios = scenarios or ScenarioService(db)
        self.compass = compass or CompassTracker()
        self.evaluator = evaluator or AchievementEvaluator()
        self.clock = clock

    # ==================== Lifecycle ====================

    def start_session(self, request: StartSessionRequest) -> GameSession:
        """
        Start a new session, completing any active one for the same
        scenario and account.

        Raises:
            NotFoundError: Scenario does not exist
            ValidationError: Scenario is not suitable for the target age group
        """
        scenario = self.scenarios.get_scenario(request.scenario_id)
        if scenario is None:
            logger.warning(f"Scenario not found: {request.scenario_id}")
            raise NotFoundError(f"Scenario not found: {request.scenario_id}")

        if not is_age_group_compatible(scenario.minimum_age, request.target_age_group):
            raise ValidationError(
                f"Scenario minimum age ({scenario.minimum_age}) exceeds "
                f"target age group ({request.target_age_group})"
            )

        if not scenario.scenes:
            raise ValidationError(f"Scenario {scenario.id} has no scenes")

        now = self.clock()

        existing = self.db.find_active_by_scenario_and_account(
            request.scenario_id, request.account_id
        )
        if existing:
            logger.info(
                f"Found {len(existing)} existing active session(s) for scenario "
                f"{request.scenario_id} and account {request.account_id}. Completing them."
            )
            for previous in existing:
                expected_version = previous.version
                self._complete(previous, now)
                self.db.save_session(previous, expected_version=expected_version)

        session = GameSession(
            id=str(uuid.uuid4()),
            scenario_id=scenario.id,
            account_id=request.account_id,
            profile_id=request.profile_id,
            player_names=list(request.player_names),
            status=SessionStatus.IN_PROGRESS,
            current_scene_id=scenario.scenes[0].id,
            start_time=now,
            target_age_group=request.target_age_group,
            scene_count=len(scenario.scenes),
            compass_values=self.compass.initialize(scenario.core_axes, now),
        )
        self.db.save_session(session)

        logger.info(
            f"Started new game session: {session.id} for Account: "
            f"{session.account_id}, Profile: {session.profile_id}"
        )
        return session

    def get_session(self, session_id: str) -> Optional[GameSession]:
        return self.db.get_session(session_id)

    def make_choice(self, request: MakeChoiceRequest) -> GameSession:
        """
        Take a branch in the given scene.

        Raises:
            NotFoundError: Session, scenario, scene or choice is missing
            InvalidStateError: Session is not in progress
            ConcurrencyError: Session changed while the choice was applied
        """
        session = self._require_session(request.session_id)

        if session.status != SessionStatus.IN_PROGRESS:
            raise InvalidStateError(
                f"Cannot make choice in session with status {session.status.value}"
            )

        scenario = self.scenarios.get_scenario(session.scenario_id)
        if scenario is None:
            raise NotFoundError(f"Scenario not found for session {session.id}")

        scene = scenario.find_scene(request.scene_id)
        if scene is None:
            raise NotFoundError(f"Scene not found in scenario: {request.scene_id}")

        branch = scene.find_branch(request.choice_text)
        if branch is None:
            raise NotFoundError(
                f"Choice not found in scene {request.scene_id}: {request.choice_text}"
            )

        now = self.clock()
        expected_version = session.version

        session.choice_history.append(
            SessionChoice(
                scene_id=scene.id,
                scene_title=scene.title,
                choice_text=request.choice_text,
                next_scene_id=request.next_scene_id,
                chosen_at=now,
                echo_generated=branch.echo_log,
                compass_change=branch.compass_change,
            )
        )

        if branch.echo_log is not None:
            session.echo_history.append(
                EchoLog(
                    echo_type=branch.echo_log.echo_type,
                    description=branch.echo_log.description,
                    strength=branch.echo_log.strength,
                    timestamp=now,
                )
            )

        if branch.compass_change is not None:
            if not self.compass.apply(session.compass_values, branch.compass_change, now):
                logger.debug(
                    f"Session {session.id} does not track axis "
                    f"'{branch.compass_change.axis}'; compass change ignored"
                )

        session.current_scene_id = request.next_scene_id
        session.elapsed_time = now - session.start_time

        next_scene = scenario.find_scene(request.next_scene_id)
        if next_scene is None or next_scene.is_terminal:
            session.status = SessionStatus.COMPLETED
            session.end_time = now

        merge_achievements(session, self.evaluator.evaluate(session, now))

        self.db.save_session(session, expected_version=expected_version)

        logger.info(
            f"Choice made in session {session.id}: {request.choice_text} -> "
            f"{request.next_scene_id or '<end>'} ({session.status.value})"
        )
        return session

    def pause_session(self, session_id: str) -> Optional[GameSession]:
        session = self.get_session(session_id)
        if session is None:
            return None

        if session.status != SessionStatus.IN_PROGRESS:
            raise InvalidStateError("Can only pause sessions in progress")

        expected_version = session.version
        session.status = SessionStatus.PAUSED
        session.is_paused = True
        session.paused_at = self.clock()

        self.db.save_session(session, expected_version=expected_version)
        logger.info(f"Paused session: {session_id}")
        return session

    def resume_session(self, session_id: str) -> Optional[GameSession]:
        session = self.get_session(session_id)
        if session is None:
            return None

        if session.status != SessionStatus.PAUSED:
            raise InvalidStateError("Can only resume paused sessions")

        expected_version = session.version
        session.status = SessionStatus.IN_PROGRESS
        session.is_paused = False
        session.paused_at = None

        self.db.save_session(session, expected_version=expected_version)
        logger.info(f"Resumed session: {session_id}")
        return session

    def end_session(self, session_id: str) -> Optional[GameSession]:
        """
        Complete a session regardless of its status.

        Ending an already completed session rewrites its end time.
        """
        session = self.get_session(session_id)
        if session is None:
            return None

        if session.status == SessionStatus.COMPLETED:
            logger.debug(f"Session {session_id} already completed; rewriting end time")

        expected_version = session.version
        self._complete(session, self.clock())

        self.db.save_session(session, expected_version=expected_version)
        logger.info(f"Ended session: {session_id}")
        return session

    def progress_session_scene(
        self, session_id: str, new_scene_id: str
    ) -> Optional[GameSession]:
        """
        Move to a scene the caller has already resolved, without recording a choice.

        Raises:
            InvalidStateError: Session is not in progress
        """
        session = self.get_session(session_id)
        if session is None:
            logger.warning(f"Session not found: {session_id}")
            return None

        if session.status != SessionStatus.IN_PROGRESS:
            raise InvalidStateError(
                f"Cannot progress scene for session with status {session.status.value}"
            )

        expected_version = session.version
        session.current_scene_id = new_scene_id
        session.elapsed_time = self.clock() - session.start_time

        self.db.save_session(session, expected_version=expected_version)
        logger.info(f"Progressed session {session_id} to scene {new_scene_id}")
        return session

    def select_character(
        self, session_id: str, character_id: str
    ) -> Optional[GameSession]:
        session = self.get_session(session_id)
        if session is None:
            return None

        expected_version = session.version
        session.selected_character_id = character_id

        self.db.save_session(session, expected_version=expected_version)
        logger.info(f"Selected character {character_id} for session {session_id}")
        return session

    def delete_session(self, session_id: str) -> bool:
        return self.db.delete_session(session_id)

    # ==================== Queries ====================

    def check_achievements(self, session_id: str) -> List[SessionAchievement]:
        """New achievements the session qualifies for; the session is not modified"""
        session = self.get_session(session_id)
        if session is None:
            return []
        return self.evaluator.evaluate(session, self.clock())

    def get_session_stats(self, session_id: str) -> Optional[SessionStatsResponse]:
        session = self.get_session(session_id)
        if session is None:
            return None

        recent_echoes = sorted(
            session.echo_history,
            key=lambda e: e.timestamp or session.start_time,
            reverse=True,
        )[: settings.recent_echo_count]

        end = session.end_time or self.clock()
        return SessionStatsResponse(
            compass_values={
                axis: tracking.current_value
                for axis, tracking in session.compass_values.items()
            },
            recent_echoes=recent_echoes,
            achievements=list(session.achievements),
            total_choices=len(session.choice_history),
            session_duration=end - session.start_time,
        )

    def get_active_sessions_count(self) -> int:
        return self.db.count_active_sessions()

    def get_sessions_by_account(self, account_id: str) -> List[GameSessionSummary]:
        return [
            GameSessionSummary.from_session(s) for s in self.db.find_by_account(account_id)
        ]

    def get_sessions_by_profile(self, profile_id: str) -> List[GameSessionSummary]:
        return [
            GameSessionSummary.from_session(s) for s in self.db.find_by_profile(profile_id)
        ]

    def get_in_progress_sessions(self, account_id: str) -> List[GameSessionSummary]:
        return [
            GameSessionSummary.from_session(s)
            for s in self.db.find_by_account(account_id, active_only=True)
        ]

    # ==================== Helpers ====================

    def _require_session(self, session_id: str) -> GameSession:
        session = self.get_session(session_id)
        if session is None:
            raise NotFoundError(f"Session not found: {session_id}")
        return session

    @staticmethod
    def _complete(session: GameSession, now: datetime) -> None:
        session.status = SessionStatus.COMPLETED
        session.end_time = now
        session.elapsed_time = now - session.start_time
        session.is_paused = False
