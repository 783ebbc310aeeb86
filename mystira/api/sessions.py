"""
Session management API endpoints.

This module exposes the session lifecycle: start, choose, pause, resume,
end, progress and delete, plus read-only stats and listings. Engine errors
are translated to HTTP responses by the handlers registered in main.
"""

from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException

from mystira.api.dependencies import get_session_service
from mystira.engine.sessions import GameSessionService
from mystira.schemas.session import (
    GameSession,
    GameSessionSummary,
    MakeChoiceRequest,
    ProgressSceneRequest,
    SelectCharacterRequest,
    SessionAchievement,
    SessionStatsResponse,
    StartSessionRequest,
)
from mystira.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _found(session, session_id: str):
    if session is None:
        logger.warning(f"Session not found: {session_id}")
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/", response_model=GameSession, status_code=201)
async def start_session(
    request: StartSessionRequest,
    service: GameSessionService = Depends(get_session_service),
):
    """
    Start a new session.

    Any InProgress or Paused session for the same scenario and account is
    completed first.

    Raises:
        HTTPException 404: Scenario not found
        HTTPException 400: Scenario not suitable for the target age group
    """
    logger.info(
        f"Session start requested: scenario={request.scenario_id} account={request.account_id}"
    )
    return service.start_session(request)


@router.post("/choice", response_model=GameSession)
async def make_choice(
    request: MakeChoiceRequest,
    service: GameSessionService = Depends(get_session_service),
):
    """
    Take a branch in the session's scenario.

    Raises:
        HTTPException 404: Session, scenario, scene or choice not found
        HTTPException 400: Session is not in progress
        HTTPException 409: Session was modified concurrently
    """
    return service.make_choice(request)


@router.get("/active/count")
async def get_active_sessions_count(
    service: GameSessionService = Depends(get_session_service),
):
    """Number of InProgress or Paused sessions"""
    return {"count": service.get_active_sessions_count()}


@router.get("/account/{account_id}", response_model=List[GameSessionSummary])
async def get_sessions_by_account(
    account_id: str, service: GameSessionService = Depends(get_session_service)
):
    return service.get_sessions_by_account(account_id)


@router.get("/account/{account_id}/in-progress", response_model=List[GameSessionSummary])
async def get_in_progress_sessions(
    account_id: str, service: GameSessionService = Depends(get_session_service)
):
    return service.get_in_progress_sessions(account_id)


@router.get("/profile/{profile_id}", response_model=List[GameSessionSummary])
async def get_sessions_by_profile(
    profile_id: str, service: GameSessionService = Depends(get_session_service)
):
    return service.get_sessions_by_profile(profile_id)


@router.get("/{session_id}", response_model=GameSession)
async def get_session(
    session_id: str, service: GameSessionService = Depends(get_session_service)
):
    """
    Get a session by ID with full data.

    Raises:
        HTTPException 404: Session not found
    """
    return _found(service.get_session(session_id), session_id)


@router.post("/{session_id}/pause", response_model=GameSession)
async def pause_session(
    session_id: str, service: GameSessionService = Depends(get_session_service)
):
    return _found(service.pause_session(session_id), session_id)


@router.post("/{session_id}/resume", response_model=GameSession)
async def resume_session(
    session_id: str, service: GameSessionService = Depends(get_session_service)
):
    return _found(service.resume_session(session_id), session_id)


@router.post("/{session_id}/end", response_model=GameSession)
async def end_session(
    session_id: str, service: GameSessionService = Depends(get_session_service)
):
    return _found(service.end_session(session_id), session_id)


@router.post("/{session_id}/progress-scene", response_model=GameSession)
async def progress_scene(
    session_id: str,
    request: ProgressSceneRequest,
    service: GameSessionService = Depends(get_session_service),
):
    """Move the session to a scene without recording a choice"""
    return _found(
        service.progress_session_scene(session_id, request.scene_id), session_id
    )


@router.post("/{session_id}/character", response_model=GameSession)
async def select_character(
    session_id: str,
    request: SelectCharacterRequest,
    service: GameSessionService = Depends(get_session_service),
):
    return _found(
        service.select_character(session_id, request.character_id), session_id
    )


@router.get("/{session_id}/stats", response_model=SessionStatsResponse)
async def get_session_stats(
    session_id: str, service: GameSessionService = Depends(get_session_service)
):
    return _found(service.get_session_stats(session_id), session_id)


@router.get("/{session_id}/achievements", response_model=List[SessionAchievement])
async def check_achievements(
    session_id: str, service: GameSessionService = Depends(get_session_service)
):
    """Achievements the session qualifies for but has not been awarded yet"""
    _found(service.get_session(session_id), session_id)
    return service.check_achievements(session_id)


@router.delete("/{session_id}", response_model=Dict[str, bool])
async def delete_session(
    session_id: str, service: GameSessionService = Depends(get_session_service)
):
    """
    Delete a session.

    Raises:
        HTTPException 404: Session not found
    """
    if not service.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"deleted": True}
