"""Character input and calculated statistics models."""

from dataclasses import dataclass, field
from typing import Any

ABILITIES = ("str", "dex", "con", "int", "wis", "cha")

ABILITY_NAMES = {
    "str": "strength",
    "dex": "dexterity",
    "con": "constitution",
    "int": "intelligence",
    "wis": "wisdom",
    "cha": "charisma",
}

# Keys of the external character document modelled by Character
CHARACTER_KEYS = frozenset({
    "id", "name", "race", "subrace", "className", "subclass", "background", "level",
    "abilityScores", "classSkillChoices", "backgroundSkillChoices", "raceSkillChoices",
    "equipment", "calculatedStats",
})


@dataclass
class AbilityScores:
    """The six ability scores."""

    strength: int = 10
    dexterity: int = 10
    constitution: int = 10
    intelligence: int = 10
    wisdom: int = 10
    charisma: int = 10

    def get_score(self, ability: str) -> int:
        """Get a score by short ("dex") or full ("dexterity") ability name."""
        key = ABILITY_NAMES.get(ability.lower(), ability.lower())
        value = getattr(self, key, 10)
        return value if isinstance(value, int) else 10

    def __getitem__(self, key: str) -> int:
        """Allow dictionary-style access to ability scores."""
        return self.get_score(key)

    def to_dict(self) -> dict[str, int]:
        """Convert to the short-key format ("str", "dex", ...)."""
        return {ability: self.get_score(ability) for ability in ABILITIES}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AbilityScores":
        """Create from short keys ("str") or full names ("strength").

        Missing or non-numeric scores default to 10.
        """
        scores = cls()
        for ability, full_name in ABILITY_NAMES.items():
            value = None
            if data:
                value = data.get(ability, data.get(full_name))
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                setattr(scores, full_name, int(value))
        return scores


@dataclass
class ProficiencyStat:
    """A saving throw or skill entry."""

    proficient: bool = False
    modifier: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"proficient": self.proficient, "modifier": self.modifier}


@dataclass
class CalculatedStats:
    """Derived statistics for a character."""

    ac: int
    initiative: int
    speed: int
    passive_perception: int
    proficiency_bonus: int
    saving_throws: dict[str, ProficiencyStat]
    hp: int
    max_hp: int
    hit_die: str
    skills: dict[str, ProficiencyStat]
    expanded_equipment: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase format consumed by display and export."""
        return {
            "ac": self.ac,
            "initiative": self.initiative,
            "speed": self.speed,
            "passivePerception": self.passive_perception,
            "proficiencyBonus": self.proficiency_bonus,
            "savingThrows": {k: v.to_dict() for k, v in self.saving_throws.items()},
            "hp": self.hp,
            "maxHp": self.max_hp,
            "hitDie": self.hit_die,
            "skills": {k: v.to_dict() for k, v in self.skills.items()},
            "expandedEquipment": list(self.expanded_equipment),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CalculatedStats":
        """Create from the camelCase format."""

        def stats(raw: dict[str, Any] | None) -> dict[str, ProficiencyStat]:
            return {
                name: ProficiencyStat(
                    proficient=bool(value.get("proficient", False)),
                    modifier=int(value.get("modifier", 0)),
                )
                for name, value in (raw or {}).items()
            }

        return cls(
            ac=data.get("ac", 10),
            initiative=data.get("initiative", 0),
            speed=data.get("speed", 30),
            passive_perception=data.get("passivePerception", 10),
            proficiency_bonus=data.get("proficiencyBonus", 2),
            saving_throws=stats(data.get("savingThrows")),
            hp=data.get("hp", 0),
            max_hp=data.get("maxHp", 0),
            hit_die=data.get("hitDie", "1d8"),
            skills=stats(data.get("skills")),
            expanded_equipment=list(data.get("expandedEquipment", [])),
        )


@dataclass
class Character:
    """A character's raw selections.

    Only the fields the rules engine reads are modelled; anything else in
    the external document is kept in ``extra`` and written back unchanged.
    """

    name: str = ""
    race: str = ""
    subrace: str | None = None
    class_name: str = ""
    subclass: str | None = None
    background: str = ""
    level: int = 1
    ability_scores: AbilityScores = field(default_factory=AbilityScores)
    class_skill_choices: list[str] = field(default_factory=list)
    background_skill_choices: list[str] = field(default_factory=list)
    race_skill_choices: list[str] = field(default_factory=list)
    equipment: list[str] = field(default_factory=list)
    id: str | None = None
    calculated_stats: CalculatedStats | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def effective_level(self) -> int:
        """Level used for calculations; anything invalid counts as 1."""
        if isinstance(self.level, int) and not isinstance(self.level, bool) and self.level >= 1:
            return self.level
        return 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to the external camelCase format."""
        data = dict(self.extra)
        data.update({
            "name": self.name,
            "race": self.race,
            "className": self.class_name,
            "background": self.background,
            "level": self.level,
            "abilityScores": self.ability_scores.to_dict(),
            "classSkillChoices": list(self.class_skill_choices),
            "backgroundSkillChoices": list(self.background_skill_choices),
            "raceSkillChoices": list(self.race_skill_choices),
            "equipment": list(self.equipment),
        })
        if self.id is not None:
            data["id"] = self.id
        if self.subrace:
            data["subrace"] = self.subrace
        if self.subclass:
            data["subclass"] = self.subclass
        if self.calculated_stats is not None:
            data["calculatedStats"] = self.calculated_stats.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Character":
        """Create a character from the external camelCase format."""
        stats = data.get("calculatedStats")
        return cls(
            id=data.get("id"),
            name=data.get("name") or "",
            race=data.get("race") or "",
            subrace=data.get("subrace") or None,
            class_name=data.get("className") or "",
            subclass=data.get("subclass") or None,
            background=data.get("background") or "",
            level=data.get("level") or 1,
            ability_scores=AbilityScores.from_dict(data.get("abilityScores")),
            class_skill_choices=list(data.get("classSkillChoices") or []),
            background_skill_choices=list(data.get("backgroundSkillChoices") or []),
            race_skill_choices=list(data.get("raceSkillChoices") or []),
            equipment=list(data.get("equipment") or []),
            calculated_stats=CalculatedStats.from_dict(stats) if isinstance(stats, dict) else None,
            extra={k: v for k, v in data.items() if k not in CHARACTER_KEYS},
        )
