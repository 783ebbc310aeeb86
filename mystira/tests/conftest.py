"""
Shared fixtures: a throwaway SQLite database, services wired to it, and a
controllable clock.
"""

from datetime import datetime, timedelta, timezone

import pytest

from mystira.db.manager import DatabaseManager
from mystira.engine.scenarios import ScenarioService
from mystira.engine.sessions import GameSessionService


class FakeClock:
    """Returns a fixed time that tests advance explicitly"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_scenario_document(**overrides):
    """Scenario with scenes A -> B -> END tracking 'honesty' and 'bravery'"""
    document = {
        "title": "The Lost Lantern",
        "description": "Help the village find its lantern before nightfall.",
        "age_group": "school",
        "minimum_age": 6,
        "core_axes": ["honesty", "bravery"],
        "scenes": [
            {
                "id": "A",
                "title": "The Village Square",
                "type": "choice",
                "branches": [
                    {
                        "choice": "Tell the truth",
                        "next_scene_id": "B",
                        "echo_log": {
                            "echo_type": "honesty",
                            "description": "You admitted you lost it",
                            "strength": 0.8,
                        },
                        "compass_change": {"axis": "honesty", "delta": 1.0},
                    },
                    {
                        "choice": "Run into the forest",
                        "next_scene_id": "C",
                        "compass_change": {"axis": "bravery", "delta": 0.5},
                    },
                ],
            },
            {
                "id": "B",
                "title": "The Old Well",
                "type": "choice",
                "branches": [
                    {"choice": "Go home", "next_scene_id": "END"},
                    {"choice": "Look down the well", "next_scene_id": "C"},
                ],
            },
            {
                "id": "C",
                "title": "The Dark Forest",
                "type": "narrative",
                "branches": [],
            },
        ],
    }
    document.update(overrides)
    return document


@pytest.fixture
def db(tmp_path):
    return DatabaseManager(str(tmp_path / "mystira-test.db"))


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def scenario_service(db):
    return ScenarioService(db)


@pytest.fixture
def session_service(db, scenario_service, clock):
    return GameSessionService(db, scenario_service, clock=clock)


@pytest.fixture
def scenario(scenario_service):
    return scenario_service.create_scenario(make_scenario_document())
