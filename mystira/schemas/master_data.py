"""
Master lists shared by scenarios and sessions: age groups, echo types and
compass axes.
"""

from typing import Dict, NamedTuple, Optional


class AgeGroup(NamedTuple):
    name: str
    minimum_age: int
    maximum_age: int

    @property
    def age_range(self) -> str:
        return f"{self.minimum_age}-{self.maximum_age}"


AGE_GROUPS = [
    AgeGroup("toddlers", 1, 3),
    AgeGroup("preschoolers", 4, 5),
    AgeGroup("school", 6, 9),
    AgeGroup("preteens", 10, 12),
    AgeGroup("teens", 13, 18),
    AgeGroup("adults", 19, 120),
]

_AGE_GROUPS_BY_NAME: Dict[str, AgeGroup] = {g.name: g for g in AGE_GROUPS}


COMPASS_AXES = [
    "honesty", "bravery", "generosity", "loyalty", "humility", "empathy", "resilience",
    "responsibility", "justice", "trust", "kindness", "discipline", "patience", "curiosity",
    "forgiveness", "self_awareness", "integrity", "assertiveness", "fairness", "self_control",
    "cooperation", "adaptability", "courage", "compassion", "gratitude", "perseverance",
    "open_mindedness", "decisiveness", "emotional_intelligence", "altruism", "ambition",
    "creativity", "independence", "respect", "self_acceptance", "focus", "moral_consistency",
    "self_reflection", "social_bonding", "conflict_resolution", "ethical_reasoning",
    "identity_alignment", "relational_security", "growth_mindset",
]  # fmt: skip

ECHO_TYPES = [
    "honesty", "deception", "loyalty", "betrayal", "justice", "injustice", "fairness", "bias",
    "forgiveness", "revenge", "sacrifice", "selfishness", "obedience", "rebellion", "doubt",
    "confidence", "shame", "pride", "regret", "hope", "despair", "grief", "denial", "acceptance",
    "awakening", "resignation", "growth", "stagnation", "kindness", "neglect", "compassion",
    "coldness", "generosity", "envy", "gratitude", "resentment", "love", "jealousy", "trust",
    "manipulation", "support", "abandonment", "bravery", "fear", "aggression", "cowardice",
    "protection", "avoidance", "confrontation", "flight", "freeze", "rescue", "denial_of_help",
    "risk_taking", "panic", "resilience", "authenticity", "masking", "conformity", "individualism",
    "dependence", "independence", "attention_seeking", "withdrawal", "role_adoption",
    "role_rejection", "listening", "interrupting", "mockery", "encouragement", "humiliation",
    "respect", "disrespect", "sharing", "withholding", "blaming", "apologizing", "curiosity",
    "closed-mindedness", "truth_seeking", "value_conflict", "reflection", "projection",
    "mirroring", "internalization", "breakthrough", "denial_of_truth", "clarity",
    "pattern_repetition", "pattern_break", "echo_amplification", "influence_spread",
    "echo_collision", "legacy_creation", "reputation_change", "morality_shift", "alignment_pull",
    "world_change", "first_blood", "oath_made", "oath_broken", "promise", "secret_revealed",
    "lie_exposed", "lesson_learned", "lesson_ignored", "role_locked", "destiny_revealed",
]  # fmt: skip

_ECHO_TYPES = {value.lower(): value for value in ECHO_TYPES}
_COMPASS_AXES = {value.lower(): value for value in COMPASS_AXES}


def parse_age_group(name: Optional[str]) -> Optional[AgeGroup]:
    """Look up a named age group, ignoring case"""
    if not name:
        return None
    return _AGE_GROUPS_BY_NAME.get(name.strip().lower())


def parse_age_range_minimum(value: str) -> Optional[int]:
    """Leading integer of an 'N-M' range string, e.g. '6-9' -> 6"""
    parts = [part.strip() for part in value.split("-") if part.strip()]
    if not parts:
        return None
    try:
        return int(parts[0])
    except ValueError:
        return None


def resolve_minimum_age(group_name_or_range: Optional[str]) -> Optional[int]:
    """
    Resolve the minimum age of an age group name or numeric range.

    Returns None when neither a known group nor a parsable range matches;
    callers treat that as "no constraint".
    """
    if not group_name_or_range or not group_name_or_range.strip():
        return None

    group = parse_age_group(group_name_or_range)
    if group is not None:
        return group.minimum_age

    return parse_age_range_minimum(group_name_or_range)


def is_age_group_compatible(scenario_minimum_age: int, target_age_group: str) -> bool:
    """True unless the target group provably starts below the scenario's minimum age"""
    if scenario_minimum_age <= 0:
        return True

    target_minimum = resolve_minimum_age(target_age_group)
    if target_minimum is None:
        return True

    return target_minimum >= scenario_minimum_age


def parse_echo_type(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    return _ECHO_TYPES.get(name.strip().lower())


def parse_compass_axis(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    return _COMPASS_AXES.get(name.strip().lower())
