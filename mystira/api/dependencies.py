"""
Shared service instances for the API routers.

Routers receive services through FastAPI's ``Depends`` so tests can swap
them with ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends

from mystira.config import settings
from mystira.db.manager import DatabaseManager
from mystira.engine.scenarios import ScenarioService
from mystira.engine.sessions import GameSessionService


@lru_cache(maxsize=1)
def get_db() -> DatabaseManager:
    return DatabaseManager(settings.database_path)


def get_scenario_service(db: DatabaseManager = Depends(get_db)) -> ScenarioService:
    return ScenarioService(db)


def get_session_service(
    db: DatabaseManager = Depends(get_db),
    scenarios: ScenarioService = Depends(get_scenario_service),
) -> GameSessionService:
    return GameSessionService(db, scenarios)
