"""
Tests for age group resolution and vocabularies.
"""

import pytest

from mystira.schemas.master_data import (
    is_age_group_compatible,
    parse_age_group,
    parse_compass_axis,
    parse_echo_type,
    resolve_minimum_age,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("school", 6),
        ("Preteens", 10),
        ("adults", 19),
        ("6-9", 6),
        (" 10 - 12 ", 10),
        ("13", 13),
        ("grown-ups", None),
        ("", None),
        (None, None),
    ],
)
def test_resolve_minimum_age(value, expected):
    assert resolve_minimum_age(value) == expected


def test_parse_age_group():
    group = parse_age_group("teens")
    assert group is not None
    assert group.age_range == "13-18"
    assert parse_age_group("elders") is None


class TestAgeCompatibility:
    def test_group_below_minimum_is_rejected(self):
        assert is_age_group_compatible(10, "school") is False

    def test_group_at_or_above_minimum_is_accepted(self):
        assert is_age_group_compatible(10, "preteens") is True
        assert is_age_group_compatible(10, "13-18") is True

    def test_unresolvable_group_is_permissive(self):
        assert is_age_group_compatible(10, "mystery-group") is True
        assert is_age_group_compatible(10, "") is True

    def test_scenario_without_minimum_age_is_always_compatible(self):
        assert is_age_group_compatible(0, "toddlers") is True


def test_parse_echo_type():
    assert parse_echo_type("Honesty") == "honesty"
    assert parse_echo_type("closed-mindedness") == "closed-mindedness"
    assert parse_echo_type("karaoke") is None
    assert parse_echo_type("") is None


def test_parse_compass_axis():
    assert parse_compass_axis("GROWTH_MINDSET") == "growth_mindset"
    assert parse_compass_axis("telepathy") is None
