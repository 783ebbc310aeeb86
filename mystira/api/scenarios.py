"""
Scenario management API endpoints.

Scenarios are validated on every create and update; structural problems
surface as 400 responses with the validator's message.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel

from mystira.api.dependencies import get_scenario_service
from mystira.engine.scenarios import ScenarioService
from mystira.schemas.scenario import Scenario, ScenarioSummary
from mystira.schemas.validation import validate_scenario_document
from mystira.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


class ScenarioValidationResponse(BaseModel):
    """Result of a dry-run validation"""

    valid: bool
    issues: List[str]


@router.post("/", response_model=Scenario, status_code=201)
async def create_scenario(
    document: Dict[str, Any] = Body(...),
    service: ScenarioService = Depends(get_scenario_service),
):
    """
    Create a scenario from a scenario document.

    Raises:
        HTTPException 400: Document is malformed or inconsistent
    """
    logger.info(f"Creating scenario: {document.get('title', '<untitled>')}")
    return service.create_scenario(document)


@router.post("/validate", response_model=ScenarioValidationResponse)
async def validate_scenario(
    document: Dict[str, Any] = Body(...),
    service: ScenarioService = Depends(get_scenario_service),
):
    """Validate a scenario document without storing it"""
    request = validate_scenario_document(document)
    is_valid, issues = service.validator.validate_spec(Scenario(**request.model_dump()))
    return ScenarioValidationResponse(valid=is_valid, issues=issues)


@router.get("/", response_model=Dict[str, List[ScenarioSummary]])
async def list_scenarios(
    age_group: Optional[str] = Query(None, description="Filter by age group"),
    service: ScenarioService = Depends(get_scenario_service),
):
    """List scenarios with summary data"""
    scenarios = service.list_scenarios(age_group=age_group)
    logger.debug(f"Returning {len(scenarios)} scenarios")
    return {
        "scenarios": [
            ScenarioSummary(
                id=s.id,
                title=s.title,
                age_group=s.age_group,
                minimum_age=s.minimum_age,
                scene_count=len(s.scenes),
                created_at=s.created_at,
            )
            for s in scenarios
        ]
    }


@router.get("/{scenario_id}", response_model=Scenario)
async def get_scenario(
    scenario_id: str, service: ScenarioService = Depends(get_scenario_service)
):
    """
    Get a scenario by ID.

    Raises:
        HTTPException 404: Scenario not found
    """
    scenario = service.get_scenario(scenario_id)
    if not scenario:
        logger.warning(f"Scenario not found: {scenario_id}")
        raise HTTPException(status_code=404, detail="Scenario not found")
    return scenario


@router.put("/{scenario_id}", response_model=Scenario)
async def update_scenario(
    scenario_id: str,
    document: Dict[str, Any] = Body(...),
    service: ScenarioService = Depends(get_scenario_service),
):
    """Replace a scenario"""
    scenario = service.update_scenario(scenario_id, document)
    if not scenario:
        raise HTTPException(status_code=404, detail="Scenario not found")
    return scenario


@router.delete("/{scenario_id}")
async def delete_scenario(
    scenario_id: str, service: ScenarioService = Depends(get_scenario_service)
):
    """Delete a scenario"""
    if not service.delete_scenario(scenario_id):
        raise HTTPException(status_code=404, detail="Scenario not found")
    return {"deleted": True, "id": scenario_id}
