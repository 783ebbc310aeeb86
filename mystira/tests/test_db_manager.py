"""
Tests for the SQLite-backed DatabaseManager.
"""

from datetime import datetime, timedelta, timezone

import pytest

from mystira.errors import ConcurrencyError
from mystira.schemas.scenario import Scenario, Scene
from mystira.schemas.session import GameSession, SessionStatus

START = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def make_session(session_id, **overrides):
    fields = {
        "id": session_id,
        "scenario_id": "scn-1",
        "account_id": "acct-1",
        "profile_id": "prof-1",
        "start_time": START,
    }
    fields.update(overrides)
    return GameSession(**fields)


class TestScenarioPersistence:
    def test_save_and_get_round_trip(self, db):
        scenario = Scenario(
            id="scn-1",
            title="Moon Garden",
            description="Grow a garden on the moon",
            age_group="school",
            scenes=[Scene(id="s1", title="Arrival")],
        )
        db.save_scenario(scenario)

        loaded = db.get_scenario("scn-1")
        assert loaded is not None
        assert loaded.title == "Moon Garden"
        assert loaded.scenes[0].id == "s1"

    def test_get_missing_returns_none(self, db):
        assert db.get_scenario("nope") is None

    def test_list_filters_by_age_group(self, db):
        db.save_scenario(Scenario(id="a", title="A", age_group="school"))
        db.save_scenario(Scenario(id="b", title="B", age_group="teens"))

        assert [s.id for s in db.list_scenarios(age_group="School")] == ["a"]
        assert len(db.list_scenarios()) == 2

    def test_delete(self, db):
        db.save_scenario(Scenario(id="a", title="A"))
        assert db.delete_scenario("a") is True
        assert db.delete_scenario("a") is False


class TestSessionPersistence:
    def test_insert_assigns_version(self, db):
        session = db.save_session(make_session("s1"))
        assert session.version == 1
        assert db.get_session("s1").version == 1

    def test_round_trip_preserves_timestamps_and_durations(self, db):
        session = make_session("s1", elapsed_time=timedelta(minutes=3, seconds=5))
        db.save_session(session)

        loaded = db.get_session("s1")
        assert loaded.start_time == START
        assert loaded.elapsed_time == timedelta(minutes=3, seconds=5)
        assert loaded.status == SessionStatus.IN_PROGRESS

    def test_update_bumps_version(self, db):
        db.save_session(make_session("s1"))
        session = db.get_session("s1")
        session.current_scene_id = "B"
        db.save_session(session, expected_version=1)

        loaded = db.get_session("s1")
        assert loaded.version == 2
        assert loaded.current_scene_id == "B"

    def test_stale_write_is_rejected(self, db):
        db.save_session(make_session("s1"))
        first = db.get_session("s1")
        second = db.get_session("s1")

        first.current_scene_id = "B"
        db.save_session(first, expected_version=1)

        second.current_scene_id = "C"
        with pytest.raises(ConcurrencyError):
            db.save_session(second, expected_version=1)

        assert db.get_session("s1").current_scene_id == "B"

    def test_write_to_deleted_session_is_rejected(self, db):
        db.save_session(make_session("s1"))
        session = db.get_session("s1")
        db.delete_session("s1")

        with pytest.raises(ConcurrencyError):
            db.save_session(session, expected_version=session.version)

    def test_unconditional_save_overwrites(self, db):
        db.save_session(make_session("s1"))
        stale = db.get_session("s1")
        db.save_session(db.get_session("s1"))

        stale.current_scene_id = "Z"
        db.save_session(stale)
        assert db.get_session("s1").current_scene_id == "Z"

    def test_delete_session(self, db):
        db.save_session(make_session("s1"))
        assert db.delete_session("s1") is True
        assert db.get_session("s1") is None
        assert db.delete_session("s1") is False

    def test_queries(self, db):
        db.save_session(make_session("s1"))
        db.save_session(
            make_session(
                "s2", status=SessionStatus.PAUSED, start_time=START + timedelta(hours=1)
            )
        )
        db.save_session(make_session("s3", status=SessionStatus.COMPLETED))
        db.save_session(make_session("s4", account_id="acct-2", profile_id="prof-2"))

        active = db.find_active_by_scenario_and_account("scn-1", "acct-1")
        assert {s.id for s in active} == {"s1", "s2"}

        by_account = db.find_by_account("acct-1")
        assert [s.id for s in by_account][0] == "s2"
        assert len(by_account) == 3

        assert {s.id for s in db.find_by_account("acct-1", active_only=True)} == {"s1", "s2"}
        assert [s.id for s in db.find_by_profile("prof-2")] == ["s4"]
        assert db.count_active_sessions() == 3
