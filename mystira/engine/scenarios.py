"""
Scenario store: create, update and look up scenarios.

Every write runs the document shape check followed by the structural
ScenarioValidator, so sessions only ever see consistent scenarios.
"""

import uuid
from typing import Any, Dict, List, Optional

from mystira.db.manager import DatabaseManager
from mystira.engine.validator import ScenarioValidator
from mystira.schemas.scenario import Scenario
from mystira.schemas.validation import validate_scenario_document
from mystira.utils.logger import get_logger

logger = get_logger(__name__)


class ScenarioService:
    """Validated access to stored scenarios"""

    def __init__(
        self, db: DatabaseManager, validator: Optional[ScenarioValidator] = None
    ):
        self.db = db
        self.validator = validator or ScenarioValidator()

    def create_scenario(self, document: Dict[str, Any]) -> Scenario:
        """
        Validate and store a new scenario.

        Raises:
            ScenarioValidationError: If the document is malformed or inconsistent
        """
        request = validate_scenario_document(document)
        scenario = Scenario(id=str(uuid.uuid4()), **request.model_dump())
        self.validator.validate(scenario)

        self.db.save_scenario(scenario)
        logger.info(f"Created scenario {scenario.id}: {scenario.title}")
        return scenario

    def update_scenario(
        self, scenario_id: str, document: Dict[str, Any]
    ) -> Optional[Scenario]:
        """
        Replace an existing scenario.

        Returns:
            The updated scenario, or None if it does not exist
        """
        existing = self.db.get_scenario(scenario_id)
        if existing is None:
            logger.warning(f"Cannot update missing scenario: {scenario_id}")
            return None

        request = validate_scenario_document(document)
        scenario = Scenario(
            id=scenario_id, created_at=existing.created_at, **request.model_dump()
        )
        self.validator.validate(scenario)

        self.db.save_scenario(scenario)
        logger.info(f"Updated scenario {scenario_id}")
        return scenario

    def validate_scenario(self, scenario: Scenario) -> None:
        self.validator.validate(scenario)

    def get_scenario(self, scenario_id: str) -> Optional[Scenario]:
        return self.db.get_scenario(scenario_id)

    def list_scenarios(
        self, age_group: Optional[str] = None, limit: int = 100
    ) -> List[Scenario]:
        return self.db.list_scenarios(limit=limit, age_group=age_group)

    def delete_scenario(self, scenario_id: str) -> bool:
        return self.db.delete_scenario(scenario_id)
