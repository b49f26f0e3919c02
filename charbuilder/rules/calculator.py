"""Derived statistics for 5th edition characters.

Implements a fixed subset of the core rules: ability modifiers, proficiency
bonus, speed, unarmored AC (armor is not applied), initiative, saving
throws, average-roll hit points, the 18 skills and passive Perception.
"""

import math
from typing import Any

from ..characters.models import ABILITIES, Character, CalculatedStats, ProficiencyStat
from ..errors import ComputationAborted

DEFAULT_SPEED = 30
DEFAULT_HIT_DIE = 8

# Canonical skill -> governing ability
SKILL_ABILITIES = {
    "Acrobatics": "dex",
    "Animal Handling": "wis",
    "Arcana": "int",
    "Athletics": "str",
    "Deception": "cha",
    "History": "int",
    "Insight": "wis",
    "Intimidation": "cha",
    "Investigation": "int",
    "Medicine": "wis",
    "Nature": "int",
    "Perception": "wis",
    "Performance": "cha",
    "Persuasion": "cha",
    "Religion": "int",
    "Sleight of Hand": "dex",
    "Stealth": "dex",
    "Survival": "wis",
}

_SKILLS_BY_KEY = {name.lower(): name for name in SKILL_ABILITIES}


def ability_modifier(score: int | None) -> int:
    """Get the modifier for an ability score; a missing score counts as 10."""
    if score is None:
        score = 10
    return (score - 10) // 2


def proficiency_bonus(level: int) -> int:
    """Get the proficiency bonus for a character level."""
    return (level - 1) // 4 + 2


def canonical_skill(name: Any) -> str | None:
    """Get the canonical skill name for any capitalization of it."""
    if not isinstance(name, str):
        return None
    return _SKILLS_BY_KEY.get(name.strip().lower())


def _walk_speed(record: dict[str, Any] | None) -> int | None:
    if not record:
        return None
    speed = record.get("speed")
    if isinstance(speed, bool):
        return None
    if isinstance(speed, int):
        return speed
    if isinstance(speed, dict) and isinstance(speed.get("walk"), int):
        return speed["walk"]
    return None


def resolve_speed(race: dict[str, Any], subrace: dict[str, Any] | None) -> int:
    """Get walking speed; the subrace overrides the race."""
    for record in (subrace, race):
        speed = _walk_speed(record)
        if speed:
            return speed
    return DEFAULT_SPEED


def hit_die_faces(class_record: dict[str, Any]) -> int:
    """Get the class hit die size."""
    hd = class_record.get("hd")
    if isinstance(hd, dict) and isinstance(hd.get("faces"), int) and hd["faces"] > 0:
        return hd["faces"]
    return DEFAULT_HIT_DIE


def max_hit_points(faces: int, con_modifier: int, level: int) -> int:
    """Get maximum HP: full die at 1st level, rounded-up average afterwards."""
    first_level = faces + con_modifier
    per_level = math.ceil((faces + 1) / 2) + con_modifier
    return first_level + per_level * (level - 1)


def background_skills(background: dict[str, Any] | None) -> list[str]:
    """Get the fixed skills a background grants.

    Fixed skills appear as ``{"insight": true}`` entries or bare strings;
    ``any``/``choose`` entries are covered by the player's chosen skills.
    """
    if not background:
        return []

    granted: list[str] = []
    for option in background.get("skillProficiencies") or []:
        if isinstance(option, str):
            granted.append(option)
        elif isinstance(option, dict):
            granted.extend(
                name for name, value in option.items()
                if value is True and canonical_skill(name)
            )
    return granted


def proficient_skills(
    character: Character,
    background: dict[str, Any] | None,
) -> set[str]:
    """Get the canonical names of every skill the character is proficient in."""
    names = [
        *character.class_skill_choices,
        *background_skills(background),
        *character.background_skill_choices,
        *character.race_skill_choices,
    ]

    return {skill for skill in map(canonical_skill, names) if skill}


def calculate_stats(
    character: Character,
    class_record: dict[str, Any] | None,
    race_record: dict[str, Any] | None,
    subrace_record: dict[str, Any] | None = None,
    background_record: dict[str, Any] | None = None,
    expanded_equipment: list[str] | None = None,
) -> CalculatedStats:
    """Calculate a character's derived statistics.

    The character is not modified.

    Args:
        character: Raw selections
        class_record: Class reference record (required)
        race_record: Race reference record (required)
        subrace_record: Subrace reference record
        background_record: Background reference record
        expanded_equipment: Equipment list with packs opened

    Returns:
        Fully populated CalculatedStats

    Raises:
        ComputationAborted: The class or race record is missing
    """
    missing = []
    if not class_record:
        missing.append("class")
    if not race_record:
        missing.append("race")
    if missing:
        raise ComputationAborted(missing)

    level = character.effective_level
    modifiers = {
        ability: ability_modifier(character.ability_scores.get_score(ability))
        for ability in ABILITIES
    }
    bonus = proficiency_bonus(level)

    saving_throws = {ability: ProficiencyStat(False, modifiers[ability]) for ability in ABILITIES}
    for ability in class_record.get("proficiency") or []:
        if ability in saving_throws:
            saving_throws[ability] = ProficiencyStat(True, modifiers[ability] + bonus)

    faces = hit_die_faces(class_record)
    max_hp = max_hit_points(faces, modifiers["con"], level)

    trained = proficient_skills(character, background_record)
    skills = {}
    for skill, ability in SKILL_ABILITIES.items():
        if skill in trained:
            skills[skill] = ProficiencyStat(True, modifiers[ability] + bonus)
        else:
            skills[skill] = ProficiencyStat(False, modifiers[ability])

    perception = skills.get("Perception")
    passive_perception = 10 + (perception.modifier if perception else modifiers["wis"])

    return CalculatedStats(
        # Unarmored: worn armor and shields are not applied
        ac=10 + modifiers["dex"],
        initiative=modifiers["dex"],
        speed=resolve_speed(race_record, subrace_record),
        passive_perception=passive_perception,
        proficiency_bonus=bonus,
        saving_throws=saving_throws,
        hp=max_hp,
        max_hp=max_hp,
        hit_die=f"1d{faces}",
        skills=skills,
        expanded_equipment=list(expanded_equipment or []),
    )
