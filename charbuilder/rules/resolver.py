"""Resolution of `(category, name)` references to reference records."""

import logging
import re
from enum import Enum
from typing import Any, Callable

from ..data.index import Record, normalize
from ..data.repository import ReferenceRepository

logger = logging.getLogger(__name__)

_PARENTHETICAL = re.compile(r"\s*\([^)]*\)\s*")


class Category(Enum):
    """Reference categories that can be resolved."""

    SPELL = "spell"
    ITEM = "item"
    FEAT = "feat"
    CLASS = "class"
    RACE = "race"
    CONDITION = "condition"
    SKILL = "skill"
    BACKGROUND = "background"
    OPTIONAL_FEATURE = "optionalfeature"
    VARIANT_RULE = "variantrule"
    ACTION = "action"
    OBJECT = "object"
    CREATURE = "creature"
    MONSTER = "monster"
    LANGUAGE = "language"
    DAMAGE = "damage"
    DICE = "dice"
    DC = "dc"
    HIT = "hit"
    ATTACK = "atk"
    HIT_MARKER = "h"
    MISS_MARKER = "m"

    @classmethod
    def coerce(cls, value: "Category | str") -> "Category | None":
        """Get the category for an enum member or its text value."""
        if isinstance(value, Category):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return None


ATTACK_TYPES = {
    "mw": "Melee Weapon Attack",
    "rw": "Ranged Weapon Attack",
    "ms": "Melee Spell Attack",
    "rs": "Ranged Spell Attack",
}

# Tried in order for any name mentioning an arcane focus
ARCANE_FOCUS_SYNONYMS = (
    "spellcasting focus",
    "arcane focus",
    "focus (arcane)",
    "arcane focus (crystal)",
    "arcane focus (orb)",
    "arcane focus (rod)",
    "arcane focus (staff)",
    "arcane focus (wand)",
)

ARCANE_FOCUS_RECORD = {
    "name": "Arcane Focus",
    "type": "G",
    "rarity": "none",
    "value": 5,
    "weight": 0,
    "entries": [
        "An arcane focus is a special item—an orb, a crystal, a rod, a specially "
        "constructed staff, a wand-like length of wood, or some similar item—designed "
        "to channel the power of arcane spells. A sorcerer, warlock, or wizard can use "
        "such an item as a spellcasting focus."
    ],
    "source": "PHB",
    "page": 150,
}


def strip_parentheticals(name: str) -> str:
    """Remove every parenthetical qualifier from a name."""
    return _PARENTHETICAL.sub(" ", name).strip()


def placeholder(name: str, category: str, description: str) -> Record:
    """Synthesize a descriptive record."""
    return {"name": name, "type": category, "description": description}


def not_found(name: str, category: str) -> Record:
    """Build the sentinel returned when a name cannot be resolved."""
    return {
        "name": name,
        "type": category,
        "description": f"{name} not found",
        "notFound": True,
    }


def is_not_found(record: Record) -> bool:
    """Check whether a resolved record is the not-found sentinel."""
    return bool(record.get("notFound"))


class TagResolver:
    """Resolves free-text references against a reference repository.

    Resolution is pure given the repository: no lookup modifies an index,
    and the same record object is returned for every spelling of a name.
    """

    def __init__(self, repository: ReferenceRepository):
        self.repository = repository
        self.files = repository.files
        self._handlers: dict[Category, Callable[[str], Record | None]] = {
            Category.SPELL: self._resolve_spell,
            Category.ITEM: self._resolve_item,
            Category.FEAT: self._resolve_feat,
            Category.CLASS: repository.get_class,
            Category.RACE: repository.get_race,
            Category.CONDITION: self._resolve_condition,
            Category.SKILL: self._resolve_skill,
            Category.BACKGROUND: self._resolve_background,
            Category.OPTIONAL_FEATURE: self._resolve_optional_feature,
            Category.VARIANT_RULE: self._resolve_variant_rule,
            Category.ACTION: self._resolve_action,
            Category.OBJECT: self._resolve_object,
            Category.CREATURE: self._resolve_creature,
            Category.MONSTER: self._resolve_creature,
        }

    def resolve(self, category: Category | str, raw_name: str) -> Record:
        """Resolve a reference to a record.

        Args:
            category: Reference category (enum member or its value)
            raw_name: Name as written in the text

        Returns:
            The matching record, a synthesized descriptive record, or the
            not-found sentinel. Never None.
        """
        name = (raw_name or "").strip()
        resolved_category = Category.coerce(category)
        if resolved_category is None:
            logger.debug("Unknown reference category %r for %r", category, name)
            return not_found(name, str(category))

        descriptive = self._describe(resolved_category, name)
        if descriptive is not None:
            return descriptive
        if not name:
            return not_found(name, resolved_category.value)

        record = self._handlers[resolved_category](name)
        if record is not None:
            return record

        fallback = self._fallback(resolved_category, name)
        if fallback is not None:
            return fallback

        return not_found(name, resolved_category.value)

    # -- descriptive-only categories ---------------------------------------

    def _describe(self, category: Category, name: str) -> Record | None:
        if category is Category.DAMAGE:
            return placeholder(name, "damage", f"{name} damage type")
        if category is Category.DICE:
            return placeholder(name, "dice", f"Dice roll: {name}")
        if category is Category.DC:
            return placeholder(name, "dc", f"Difficulty Class: {name}")
        if category is Category.HIT:
            return placeholder(name, "hit", f"Attack modifier: +{name}")
        if category is Category.ATTACK:
            description = ATTACK_TYPES.get(name.lower(), f"Attack type: {name}")
            return placeholder(name, "atk", description)
        if category is Category.HIT_MARKER:
            return placeholder("Hit", "hit", "The attack hits the target")
        if category is Category.MISS_MARKER:
            return placeholder("Miss", "miss", "The attack misses the target")
        if category is Category.LANGUAGE:
            return placeholder(name, "language", f"{name} language")
        return None

    def _fallback(self, category: Category, name: str) -> Record | None:
        if category is Category.SKILL:
            return placeholder(name, "skill", f"{name} skill")
        if category is Category.BACKGROUND:
            return placeholder(name, "background", f"{name} background")
        if category is Category.OBJECT:
            return placeholder(name, "object", f"{name} object")
        if category in (Category.CREATURE, Category.MONSTER):
            return placeholder(name, category.value, f"{name} {category.value}")
        if category is Category.VARIANT_RULE:
            return placeholder(name, "variantrule", f"{name} variant rule")
        if category is Category.ACTION:
            return placeholder(name, "action", f"{name} action")
        return None

    # -- shared strategies --------------------------------------------------

    def _indexed_or_scanned(self, category: str, filename: str, key: str, name: str) -> Record | None:
        index = self.repository.index(category)
        if index is not None:
            record = index.get(normalize(name))
            if record is not None:
                return record
        return self.repository.find_record(filename, key, name)

    def _scan(self, records: list[Record], search: str) -> Record | None:
        """Exact, then parenthetical-stripped, then substring match."""
        for record in records:
            if normalize(record.get("name")) == search:
                return record

        stripped = strip_parentheticals(search)
        if stripped != search:
            for record in records:
                if normalize(record.get("name")) == stripped:
                    return record

        for record in records:
            if search in normalize(record.get("name")):
                return record
        return None

    # -- per-category chains ------------------------------------------------

    def _resolve_spell(self, name: str) -> Record | None:
        search = normalize(name)
        index = self.repository.index("spells")
        if index is not None:
            spell = index.get(search)
            if spell is not None:
                return spell

        spells = self.repository.document_records(self.files.spells, "spell")
        for spell in spells:
            if normalize(spell.get("name")) == search:
                return spell
        for spell in spells:
            if any(normalize(alias) == search for alias in spell.get("alias") or []):
                return spell
        return None

    def _item_by_name(self, search: str) -> Record | None:
        index = self.repository.index("items")
        if index is not None:
            item = index.get(search)
            if item is not None:
                return item
        for filename, key in ((self.files.base_items, "baseitem"), (self.files.items, "item")):
            item = self.repository.find_record(filename, key, search)
            if item is not None:
                return item
        return None

    def _resolve_item(self, name: str) -> Record | None:
        search = normalize(name)

        if "arcane focus" in search:
            item = self._item_by_name(search)
            if item is not None:
                return item
            for synonym in ARCANE_FOCUS_SYNONYMS:
                item = self._item_by_name(synonym)
                if item is not None:
                    return item
            return dict(ARCANE_FOCUS_RECORD)

        index = self.repository.index("items")
        if index is not None:
            item = index.get(search)
            if item is not None:
                return item
            stripped = strip_parentheticals(search)
            if stripped != search:
                item = index.get(stripped)
                if item is not None:
                    return item

        for filename, key in ((self.files.base_items, "baseitem"), (self.files.items, "item")):
            item = self._scan(self.repository.document_records(filename, key), search)
            if item is not None:
                return item
        return None

    def _resolve_feat(self, name: str) -> Record | None:
        return self.repository.get_feat(name)

    def _resolve_condition(self, name: str) -> Record | None:
        return self._indexed_or_scanned("conditions", self.files.conditions, "condition", name)

    def _resolve_skill(self, name: str) -> Record | None:
        return self._indexed_or_scanned("skills", self.files.skills, "skill", name)

    def _resolve_background(self, name: str) -> Record | None:
        return self._indexed_or_scanned("backgrounds", self.files.backgrounds, "background", name)

    def _resolve_variant_rule(self, name: str) -> Record | None:
        return self._indexed_or_scanned("variantrules", self.files.variant_rules, "variantrule", name)

    def _resolve_action(self, name: str) -> Record | None:
        return self._indexed_or_scanned("actions", self.files.actions, "action", name)

    def _resolve_object(self, name: str) -> Record | None:
        search = normalize(name)
        for item in self.repository.document_records(self.files.items, "item"):
            if search in normalize(item.get("name")):
                return item
        return None

    def _resolve_creature(self, name: str) -> Record | None:
        return self.repository.find_record(self.files.bestiary, "monster", name)

    def _race_feature(self, search: str) -> Record | None:
        for race in self.repository.document_records(self.files.races, "race"):
            for entry in race.get("entries") or []:
                if (
                    isinstance(entry, dict)
                    and entry.get("type") == "entries"
                    and normalize(entry.get("name")) == search
                ):
                    return {
                        "name": entry["name"],
                        "entries": entry.get("entries"),
                        "source": race.get("source") or "PHB",
                        "page": race.get("page"),
                        "type": "raceFeature",
                    }
        return None

    def _resolve_optional_feature(self, name: str) -> Record | None:
        search = normalize(name)
        attempts: list[Callable[[], Any]] = [
            lambda: self.repository.find_record(self.files.optional_features, "optionalfeature", search),
            lambda: self.repository.find_record(self.files.senses, "sense", search),
            lambda: self._race_feature(search),
            lambda: (self.repository.index("features") or {}).get(search),
        ]
        for attempt in attempts:
            record = attempt()
            if record is not None:
                return record

        for class_name in self.repository.config.class_names:
            filename = self.repository.config.class_file(class_name)
            for key in ("classFeature", "optionalfeature"):
                record = self.repository.find_record(filename, key, search)
                if record is not None:
                    return record
        return None


def resolve(repository: ReferenceRepository, category: Category | str, name: str) -> Record:
    """Resolve a single reference without keeping a resolver around."""
    return TagResolver(repository).resolve(category, name)
