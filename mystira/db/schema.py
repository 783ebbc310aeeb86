"""
Database schema definitions using SQLAlchemy.

Scenarios and game sessions are stored as JSON documents alongside the
handful of columns the engine filters on.
"""

# mypy: ignore-errors

from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.orm import declarative_base

from mystira.utils.clock import utc_now

Base = declarative_base()  # type: ignore


class ScenarioRecord(Base):
    """
    Scenario table storing authored narratives.

    Attributes:
        id: Unique scenario identifier (UUID)
        title: Scenario title
        age_group: Target age group name
        minimum_age: Minimum player age
        document: Complete Scenario as JSON
        created_at: Timestamp when scenario was created
        updated_at: Timestamp when scenario was last modified
    """

    __tablename__ = "scenarios"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    age_group = Column(String, nullable=False, default="", index=True)
    minimum_age = Column(Integer, nullable=False, default=0)
    document = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )


class GameSessionRecord(Base):
    """
    Game session table.

    Attributes:
        id: Unique session identifier (UUID)
        scenario_id: Scenario being played
        account_id: Owning account
        profile_id: Playing profile
        status: InProgress, Paused or Completed
        start_time: When the session was started
        version: Write counter used for conditional updates
        document: Complete GameSession as JSON
        created_at: Timestamp when session was created
        updated_at: Timestamp when session was last updated
    """

    __tablename__ = "game_sessions"

    id = Column(String, primary_key=True)
    scenario_id = Column(String, nullable=False, index=True)
    account_id = Column(String, nullable=False, default="", index=True)
    profile_id = Column(String, nullable=False, default="", index=True)
    status = Column(String, nullable=False, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    version = Column(Integer, nullable=False, default=0)
    document = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )
