"""
Schema validation utilities
"""

import copy
from typing import Any, Dict

from jsonschema import Draft7Validator
from pydantic import ValidationError as PydanticValidationError

from mystira.errors import ScenarioValidationError
from mystira.schemas.scenario import ScenarioCreateRequest

_NULLABLE_STRING = {"type": ["string", "null"]}

SCENARIO_DOCUMENT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["title", "scenes"],
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "tags": {"type": "array", "items": {"type": "string"}},
        "age_group": {"type": "string"},
        "minimum_age": {"type": "integer", "minimum": 0},
        "core_axes": {"type": "array", "items": {"type": "string"}},
        "scenes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "title", "type"],
                "properties": {
                    "id": {"type": "string"},
                    "title": {"type": "string"},
                    "type": {"enum": ["narrative", "choice", "roll", "special"]},
                    "description": {"type": "string"},
                    "next_scene_id": _NULLABLE_STRING,
                    "difficulty": {"type": "integer"},
                    "media": {
                        "type": ["object", "null"],
                        "properties": {
                            "image": _NULLABLE_STRING,
                            "audio": _NULLABLE_STRING,
                            "video": _NULLABLE_STRING,
                        },
                    },
                    "branches": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["choice"],
                            "properties": {
                                "choice": {"type": "string"},
                                "next_scene_id": _NULLABLE_STRING,
                                "echo_log": {
                                    "type": ["object", "null"],
                                    "required": ["echo_type", "strength"],
                                    "properties": {
                                        "echo_type": {"type": "string"},
                                        "description": {"type": "string"},
                                        "strength": {"type": "number"},
                                    },
                                },
                                "compass_change": {
                                    "type": ["object", "null"],
                                    "required": ["axis", "delta"],
                                    "properties": {
                                        "axis": {"type": "string"},
                                        "delta": {"type": "number"},
                                        "developmental_link": _NULLABLE_STRING,
                                    },
                                },
                            },
                        },
                    },
                },
            },
        },
    },
}

_document_validator = Draft7Validator(SCENARIO_DOCUMENT_SCHEMA)


def validate_scenario_document(document: Dict[str, Any]) -> ScenarioCreateRequest:
    """
    Check the wire shape of a scenario document and parse it.

    Raises:
        ScenarioValidationError: If the document does not match the schema
    """
    errors = sorted(_document_validator.iter_errors(document), key=lambda e: [str(p) for p in e.path])
    if errors:
        details = "; ".join(
            f"{'/'.join(str(p) for p in error.path) or '<root>'}: {error.message}"
            for error in errors
        )
        raise ScenarioValidationError(
            f"Scenario document does not match the required schema: {details}"
        )

    # Branch next-scene ids may arrive as null on the wire
    document = copy.deepcopy(document)
    for scene in document.get("scenes", []):
        for branch in scene.get("branches", []) or []:
            if branch.get("next_scene_id") is None:
                branch["next_scene_id"] = ""

    try:
        return ScenarioCreateRequest(**document)
    except PydanticValidationError as e:
        raise ScenarioValidationError(f"Invalid scenario document: {e}") from e
