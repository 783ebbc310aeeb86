"""
Structural validation of scenarios before they are stored
"""

from typing import List, Tuple

from mystira.errors import ScenarioValidationError
from mystira.schemas.master_data import parse_echo_type
from mystira.schemas.scenario import END_SCENE_ID, Scenario, SceneType
from mystira.utils.logger import get_logger

logger = get_logger(__name__)

MIN_ECHO_STRENGTH = 0.1
MAX_ECHO_STRENGTH = 1.0
MIN_COMPASS_DELTA = -1.0
MAX_COMPASS_DELTA = 1.0


class ScenarioValidator:
    """Checks a scenario's internal consistency"""

    def validate_spec(self, scenario: Scenario) -> Tuple[bool, List[str]]:
        """Collect every issue in the scenario"""
        issues: List[str] = []

        if not scenario.title.strip():
            issues.append("Scenario title cannot be empty")
        if not scenario.description.strip():
            issues.append("Scenario description cannot be empty")
        if not scenario.scenes:
            issues.append("Scenario must contain at least one scene")

        scene_ids = {scene.id for scene in scenario.scenes}

        for scene in scenario.scenes:
            if not scene.id.strip():
                issues.append(f"Scene is missing an ID (Title: {scene.title})")
            if not scene.title.strip():
                issues.append(f"Scene is missing a title (ID: {scene.id})")

            if scene.type != SceneType.CHOICE and any(
                b.echo_log is not None for b in scene.branches
            ):
                issues.append(f"Only choice scenes can have echo logs (Scene ID: {scene.id})")

            for branch in scene.branches:
                where = f"(Scene ID: {scene.id}, Choice: {branch.choice})"

                echo = branch.echo_log
                if echo is not None:
                    if not MIN_ECHO_STRENGTH <= echo.strength <= MAX_ECHO_STRENGTH:
                        issues.append(
                            f"Echo log strength must be between {MIN_ECHO_STRENGTH} "
                            f"and {MAX_ECHO_STRENGTH} {where}"
                        )
                    if parse_echo_type(echo.echo_type) is None:
                        issues.append(f"Invalid echo type '{echo.echo_type}' {where}")
                    if not echo.description.strip():
                        issues.append(f"Echo log description cannot be empty {where}")

                change = branch.compass_change
                if change is not None:
                    if not MIN_COMPASS_DELTA <= change.delta <= MAX_COMPASS_DELTA:
                        issues.append(
                            f"Compass change delta must be between {MIN_COMPASS_DELTA} "
                            f"and {MAX_COMPASS_DELTA} {where}"
                        )
                    if not change.axis.strip():
                        issues.append(f"Compass axis cannot be empty {where}")
                    # Axes are not cross-checked against scenario.core_axes;
                    # branches may name axes the scenario does not track.

                next_id = branch.next_scene_id
                if next_id not in ("", END_SCENE_ID) and next_id not in scene_ids:
                    issues.append(
                        f"Branch references non-existent next scene ID '{next_id}' {where}"
                    )

        return len(issues) == 0, issues

    def validate(self, scenario: Scenario) -> None:
        """
        Validate a scenario, failing on the first issue found.

        Raises:
            ScenarioValidationError: Describing the first issue
        """
        is_valid, issues = self.validate_spec(scenario)
        if not is_valid:
            logger.warning(
                f"Scenario '{scenario.title}' failed validation with {len(issues)} issue(s)"
            )
            for i, issue in enumerate(issues[:5], 1):
                logger.debug(f"  Issue {i}: {issue}")
            raise ScenarioValidationError(issues[0])
