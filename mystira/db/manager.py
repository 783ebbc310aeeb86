"""
Database manager for Mystira.

This module provides a high-level interface for database operations,
handling scenarios and game sessions with automatic connection management.
"""

import os
from typing import List, Optional

from sqlalchemy import create_engine, desc, func
from sqlalchemy.orm import Session as DBSession
from sqlalchemy.orm import sessionmaker

from mystira.db.schema import Base, GameSessionRecord, ScenarioRecord
from mystira.errors import ConcurrencyError
from mystira.schemas.scenario import Scenario
from mystira.schemas.session import ACTIVE_STATUSES, GameSession
from mystira.utils.clock import utc_now
from mystira.utils.logger import get_logger

logger = get_logger(__name__)

_ACTIVE_STATUS_VALUES = [status.value for status in ACTIVE_STATUSES]


class DatabaseManager:
    """
    Manages database operations for scenarios and game sessions.

    Scenarios are read-mostly; sessions are written after every engine
    operation with a version check so concurrent writers cannot silently
    overwrite each other.

    Attributes:
        db_path: Path to the SQLite database file
        engine: SQLAlchemy engine for database connections
        SessionLocal: Factory for creating database sessions
    """

    def __init__(self, db_path: str = "data/mystira.db"):
        """
        Initialize the database manager.

        Args:
            db_path: Path to SQLite database file (created if doesn't exist)
        """
        self.db_path = db_path

        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        self.engine = create_engine(
            f"sqlite:///{db_path}",
            echo=False,
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine)

        logger.info(f"Database initialized at {db_path}")

    # ==================== Scenario Operations ====================

    def save_scenario(self, scenario: Scenario) -> Scenario:
        """
        Insert or replace a scenario.

        Args:
            scenario: Scenario with a non-empty id

        Returns:
            The saved scenario
        """
        db: DBSession = self.SessionLocal()
        try:
            existing = (
                db.query(ScenarioRecord).filter(ScenarioRecord.id == scenario.id).first()
            )
            document = scenario.model_dump(mode="json")

            if existing:
                existing.title = scenario.title
                existing.age_group = scenario.age_group
                existing.minimum_age = scenario.minimum_age
                existing.document = document
                existing.updated_at = utc_now()
            else:
                db.add(
                    ScenarioRecord(
                        id=scenario.id,
                        title=scenario.title,
                        age_group=scenario.age_group,
                        minimum_age=scenario.minimum_age,
                        document=document,
                        created_at=scenario.created_at,
                    )
                )

            db.commit()
            logger.debug(f"Saved scenario {scenario.id}: {scenario.title}")
            return scenario
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to save scenario: {e}")
            raise
        finally:
            db.close()

    def get_scenario(self, scenario_id: str) -> Optional[Scenario]:
        """
        Retrieve a scenario by ID.

        Returns:
            The scenario, or None if not found
        """
        db: DBSession = self.SessionLocal()
        try:
            record = (
                db.query(ScenarioRecord).filter(ScenarioRecord.id == scenario_id).first()
            )
            if record:
                return Scenario.model_validate(record.document)
            return None
        finally:
            db.close()

    def list_scenarios(
        self, limit: int = 100, age_group: Optional[str] = None
    ) -> List[Scenario]:
        """
        List scenarios, most recent first.

        Args:
            limit: Maximum number of scenarios to return
            age_group: Optional age group filter (case-insensitive)
        """
        db: DBSession = self.SessionLocal()
        try:
            query = db.query(ScenarioRecord)
            if age_group:
                query = query.filter(
                    func.lower(ScenarioRecord.age_group) == age_group.lower()
                )

            records = query.order_by(desc(ScenarioRecord.created_at)).limit(limit).all()
            return [Scenario.model_validate(r.document) for r in records]
        finally:
            db.close()

    def delete_scenario(self, scenario_id: str) -> bool:
        """
        Delete a scenario.

        Returns:
            True if deleted, False if not found
        """
        db: DBSession = self.SessionLocal()
        try:
            record = (
                db.query(ScenarioRecord).filter(ScenarioRecord.id == scenario_id).first()
            )
            if record:
                db.delete(record)
                db.commit()
                logger.info(f"Deleted scenario {scenario_id}")
                return True
            return False
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to delete scenario: {e}")
            raise
        finally:
            db.close()

    # ==================== Session Operations ====================

    def save_session(
        self, session: GameSession, expected_version: Optional[int] = None
    ) -> GameSession:
        """
        Insert or update a game session.

        Args:
            session: Session to persist; its ``version`` is bumped in place
            expected_version: Version the caller read. When given, the write
                only succeeds if the stored row still carries that version.

        Returns:
            The saved session

        Raises:
            ConcurrencyError: If the stored version differs from expected_version
        """
        db: DBSession = self.SessionLocal()
        try:
            existing = (
                db.query(GameSessionRecord)
                .filter(GameSessionRecord.id == session.id)
                .first()
            )

            if existing is None:
                if expected_version:
                    raise ConcurrencyError(
                        f"Session {session.id} was deleted by another writer"
                    )
                session.version = 1
                db.add(
                    GameSessionRecord(
                        id=session.id,
                        scenario_id=session.scenario_id,
                        account_id=session.account_id,
                        profile_id=session.profile_id,
                        status=session.status.value,
                        start_time=session.start_time,
                        version=session.version,
                        document=session.model_dump(mode="json"),
                        created_at=utc_now(),
                    )
                )
            else:
                base_version = (
                    existing.version if expected_version is None else expected_version
                )
                new_version = base_version + 1
                document = session.model_copy(update={"version": new_version}).model_dump(
                    mode="json"
                )

                updated = (
                    db.query(GameSessionRecord)
                    .filter(
                        GameSessionRecord.id == session.id,
                        GameSessionRecord.version == base_version,
                    )
                    .update(
                        {
                            "scenario_id": session.scenario_id,
                            "account_id": session.account_id,
                            "profile_id": session.profile_id,
                            "status": session.status.value,
                            "start_time": session.start_time,
                            "version": new_version,
                            "document": document,
                            "updated_at": utc_now(),
                        },
                        synchronize_session=False,
                    )
                )
                if updated == 0:
                    raise ConcurrencyError(
                        f"Session {session.id} was modified concurrently "
                        f"(expected version {base_version}, found {existing.version})"
                    )
                session.version = new_version

            db.commit()
            logger.debug(
                f"Saved session {session.id} at version {session.version} ({session.status.value})"
            )
            return session
        except ConcurrencyError as e:
            db.rollback()
            logger.warning(str(e))
            raise
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to save session: {e}")
            raise
        finally:
            db.close()

    def get_session(self, session_id: str) -> Optional[GameSession]:
        """
        Retrieve a session by ID.

        Returns:
            The session, or None if not found
        """
        db: DBSession = self.SessionLocal()
        try:
            record = (
                db.query(GameSessionRecord)
                .filter(GameSessionRecord.id == session_id)
                .first()
            )
            if record:
                return self._to_session(record)
            return None
        finally:
            db.close()

    def delete_session(self, session_id: str) -> bool:
        """
        Delete a session from the database.

        Returns:
            True if deleted successfully, False if not found
        """
        db: DBSession = self.SessionLocal()
        try:
            record = (
                db.query(GameSessionRecord)
                .filter(GameSessionRecord.id == session_id)
                .first()
            )
            if record:
                db.delete(record)
                db.commit()
                logger.info(f"Deleted session {session_id}")
                return True
            return False
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to delete session: {e}")
            raise
        finally:
            db.close()

    def find_active_by_scenario_and_account(
        self, scenario_id: str, account_id: str
    ) -> List[GameSession]:
        """Sessions for the pair that are InProgress or Paused"""
        db: DBSession = self.SessionLocal()
        try:
            records = (
                db.query(GameSessionRecord)
                .filter(
                    GameSessionRecord.scenario_id == scenario_id,
                    GameSessionRecord.account_id == account_id,
                    GameSessionRecord.status.in_(_ACTIVE_STATUS_VALUES),
                )
                .all()
            )
            return [self._to_session(r) for r in records]
        finally:
            db.close()

    def find_by_account(self, account_id: str, active_only: bool = False) -> List[GameSession]:
        """Sessions of an account, most recently started first"""
        db: DBSession = self.SessionLocal()
        try:
            query = db.query(GameSessionRecord).filter(
                GameSessionRecord.account_id == account_id
            )
            if active_only:
                query = query.filter(GameSessionRecord.status.in_(_ACTIVE_STATUS_VALUES))
            records = query.order_by(desc(GameSessionRecord.start_time)).all()
            return [self._to_session(r) for r in records]
        finally:
            db.close()

    def find_by_profile(self, profile_id: str) -> List[GameSession]:
        """Sessions of a profile, most recently started first"""
        db: DBSession = self.SessionLocal()
        try:
            records = (
                db.query(GameSessionRecord)
                .filter(GameSessionRecord.profile_id == profile_id)
                .order_by(desc(GameSessionRecord.start_time))
                .all()
            )
            return [self._to_session(r) for r in records]
        finally:
            db.close()

    def count_active_sessions(self) -> int:
        """Number of sessions that are InProgress or Paused"""
        db: DBSession = self.SessionLocal()
        try:
            return (
                db.query(GameSessionRecord)
                .filter(GameSessionRecord.status.in_(_ACTIVE_STATUS_VALUES))
                .count()
            )
        finally:
            db.close()

    @staticmethod
    def _to_session(record: GameSessionRecord) -> GameSession:
        session = GameSession.model_validate(record.document)
        # The row is authoritative for the write counter
        session.version = record.version
        return session
