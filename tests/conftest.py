"""Shared test fixtures."""

import copy

import pytest
from fastapi.testclient import TestClient

from charbuilder.data.repository import ReferenceRepository
from charbuilder.rules.equipment import EquipmentExpander
from charbuilder.rules.resolver import TagResolver
from charbuilder.web.server import create_app

DOCUMENTS = {
    "races.json": {
        "race": [
            {
                "name": "Human",
                "source": "PHB",
                "page": 29,
                "speed": 30,
                "entries": [
                    {"type": "entries", "name": "Languages", "entries": ["You can speak Common."]},
                ],
            },
            {
                "name": "Dwarf",
                "source": "PHB",
                "page": 18,
                "speed": 25,
                "entries": [
                    {
                        "type": "entries",
                        "name": "Dwarven Resilience",
                        "entries": ["You have advantage on saving throws against poison."],
                    },
                ],
            },
            {"name": "Elf", "source": "PHB", "speed": {"walk": 30}},
            {"name": "Dhampir", "source": "VRGR", "speed": 35},
        ],
        "subrace": [
            {"raceName": "Human", "raceSource": "PHB", "source": "PHB"},
            {"name": "Variant", "raceName": "Human", "raceSource": "PHB", "source": "PHB"},
            {"name": "Hill", "raceName": "Dwarf", "raceSource": "PHB", "source": "PHB"},
            {"name": "Mountain", "raceName": "Dwarf", "raceSource": "PHB", "source": "PHB"},
            {"name": "Duergar", "raceName": "Dwarf", "raceSource": "PHB", "source": "SCAG"},
            {"name": "Wood", "raceName": "Elf", "raceSource": "PHB", "source": "PHB", "speed": 35},
        ],
    },
    "class/class-wizard.json": {
        "class": [
            {
                "name": "Wizard",
                "source": "PHB",
                "hd": {"number": 1, "faces": 6},
                "proficiency": ["int", "wis"],
                "startingProficiencies": {
                    "skills": [
                        {"choose": {"from": ["arcana", "history", "insight", "investigation"], "count": 2}},
                    ],
                },
            },
        ],
        "subclass": [
            {
                "name": "School of Evocation",
                "shortName": "Evocation",
                "className": "Wizard",
                "classSource": "PHB",
                "source": "PHB",
            },
            {
                "name": "School of Chronurgy",
                "shortName": "Chronurgy",
                "className": "Wizard",
                "classSource": "PHB",
                "source": "EGW",
            },
        ],
        "classFeature": [
            {
                "name": "Arcane Recovery",
                "className": "Wizard",
                "level": 1,
                "source": "PHB",
                "entries": ["You have learned to regain some of your magical energy."],
            },
        ],
        "subclassFeature": [
            {"name": "Evocation Savant", "className": "Wizard", "level": 2, "source": "PHB"},
        ],
    },
    "class/class-fighter.json": {
        "class": [
            {
                "name": "Fighter",
                "source": "PHB",
                "hd": {"number": 1, "faces": 10},
                "proficiency": ["str", "con"],
            },
        ],
        "subclass": [
            {"name": "Champion", "className": "Fighter", "classSource": "PHB", "source": "PHB"},
        ],
        "classFeature": [
            {"name": "Second Wind", "className": "Fighter", "level": 1, "source": "PHB"},
            {"name": "Action Surge", "className": "Fighter", "level": 2, "source": "PHB"},
        ],
    },
    "class/class-rogue.json": {
        "class": [{"name": "Rogue", "source": "PHB", "proficiency": ["dex", "int"]}],
    },
    "backgrounds.json": {
        "background": [
            {"name": "Acolyte", "source": "PHB", "skillProficiencies": [{"insight": True, "religion": True}]},
            {"name": "Sage", "source": "PHB", "skillProficiencies": [{"arcana": True, "history": True}]},
            {"name": "Custom Background", "source": "PHB", "skillProficiencies": [{"any": 2}]},
            {
                "name": "Haunted One",
                "source": "CoS",
                "skillProficiencies": [{"choose": {"from": ["arcana", "investigation"]}}],
            },
        ],
    },
    "feats.json": {
        "feat": [
            {"name": "Alert", "source": "PHB", "entries": ["Always on the lookout for danger."]},
            {"name": "Tough", "source": "PHB"},
            {"name": "Fey Touched", "source": "TCE"},
        ],
    },
    "spells/spells-phb.json": {
        "spell": [
            {"name": "Fireball", "level": 3, "source": "PHB", "school": "V"},
            {"name": "Fire Bolt", "level": 0, "source": "PHB", "school": "V"},
            {"name": "Magic Missile", "level": 1, "source": "PHB", "school": "V"},
            {"name": "Shield", "level": 1, "source": "PHB", "school": "A"},
            {"name": "Cure Wounds", "level": 1, "source": "PHB", "school": "V"},
            {"name": "Misty Step", "level": 2, "source": "PHB", "school": "C"},
            {
                "name": "Tasha's Hideous Laughter",
                "level": 1,
                "source": "PHB",
                "school": "E",
                "alias": ["Hideous Laughter"],
            },
        ],
    },
    "book/book-phb.json": {
        "data": [
            {"type": "section", "name": "Equipment", "entries": []},
            {
                "type": "section",
                "name": "Spells",
                "entries": [
                    {
                        "type": "entries",
                        "name": "Wizard Spells",
                        "entries": [
                            {
                                "type": "list",
                                "items": [
                                    "{@spell Fire Bolt}",
                                    "{@spell Magic Missile}",
                                    "{@spell Shield}",
                                    "{@spell Tasha's Hideous Laughter}",
                                    "{@spell Misty Step}",
                                    "{@spell Fireball}",
                                ],
                            },
                        ],
                    },
                    {
                        "type": "entries",
                        "name": "Cleric Spells",
                        "entries": [{"type": "list", "items": ["{@spell Cure Wounds|PHB}"]}],
                    },
                    {
                        "type": "entries",
                        "name": "Artificer Spells",
                        "entries": [{"type": "list", "items": ["{@spell Shield}"]}],
                    },
                ],
            },
        ],
    },
    "items-base.json": {
        "baseitem": [
            {
                "name": "Longsword",
                "source": "PHB",
                "type": "M",
                "weapon": True,
                "weaponCategory": "martial",
                "value": 1500,
            },
            {"name": "Longbow", "source": "PHB", "type": "R", "weapon": True, "weaponCategory": "martial"},
            {"name": "Dagger", "source": "PHB", "type": "M", "weapon": True, "weaponCategory": "simple"},
            {
                "name": "Light Crossbow",
                "source": "PHB",
                "type": "R",
                "weapon": True,
                "weaponCategory": "simple",
            },
            {
                "name": "Double-Bladed Scimitar",
                "source": "ERLW",
                "type": "M",
                "weapon": True,
                "weaponCategory": "martial",
            },
            {"name": "Crossbow Bolts", "source": "PHB", "type": "A"},
            {"name": "Wand", "source": "PHB", "type": "SCF", "scfType": "arcane"},
            {"name": "Crystal", "source": "PHB", "type": "SCF", "scfType": "arcane"},
            {"name": "Sprig of Mistletoe", "source": "PHB", "type": "SCF", "scfType": "druidic"},
        ],
    },
    "items.json": {
        "item": [
            {
                "name": "Longsword",
                "source": "PHB",
                "type": "M",
                "weapon": True,
                "weaponCategory": "martial",
                "value": 9999,
            },
            {
                "name": "Explorer's Pack",
                "source": "PHB",
                "type": "G",
                "contents": [
                    "Backpack",
                    {"item": "bedroll|phb"},
                    {"item": "torch|phb", "quantity": 10},
                    {"item": "rations (1 day)|phb", "quantity": 10},
                    {"special": "50 feet of hempen rope"},
                ],
            },
            {
                "name": "Scholar's Pack",
                "source": "PHB",
                "type": "G",
                "contents": [{"item": "book|phb"}, {"item": "ink (1-ounce bottle)|phb"}],
            },
            {"name": "Amulet", "source": "PHB", "type": "SCF", "scfType": "holy"},
            {"name": "Reliquary", "type": "SCF", "scfType": "holy"},
            {"name": "Potion of Healing", "source": "DMG", "type": "P", "rarity": "common"},
            {"name": "Bag of Holding", "source": "DMG", "type": "W", "rarity": "uncommon"},
        ],
    },
    "conditionsdiseases.json": {
        "condition": [
            {"name": "Blinded", "source": "PHB"},
            {"name": "Poisoned", "source": "PHB"},
        ],
    },
    "skills.json": {
        "skill": [
            {"name": "Stealth", "source": "PHB", "ability": "dex"},
            {"name": "Arcana", "source": "PHB", "ability": "int"},
        ],
    },
    "actions.json": {"action": [{"name": "Dash", "source": "PHB"}]},
    "variantrules.json": {"variantrule": [{"name": "Encumbrance", "source": "PHB"}]},
    "bestiary/bestiary-phb.json": {"monster": [{"name": "Goblin", "source": "MM"}]},
    "optionalfeatures.json": {
        "optionalfeature": [{"name": "Agonizing Blast", "source": "PHB", "featureType": ["EI"]}],
    },
    "senses.json": {"sense": [{"name": "Darkvision", "source": "PHB"}]},
}


def build_documents() -> dict:
    """Fresh deep copy of the fixture documents."""
    return copy.deepcopy(DOCUMENTS)


@pytest.fixture()
def documents() -> dict:
    """Parsed reference documents keyed by file name."""
    return build_documents()


@pytest.fixture()
def repository(documents) -> ReferenceRepository:
    """Small in-memory reference repository."""
    return ReferenceRepository.from_documents(documents)


@pytest.fixture()
def resolver(repository) -> TagResolver:
    """Tag resolver over the fixture repository."""
    return TagResolver(repository)


@pytest.fixture()
def expander(resolver) -> EquipmentExpander:
    """Equipment expander over the fixture repository."""
    return EquipmentExpander(resolver)


@pytest.fixture()
def client(repository) -> TestClient:
    """FastAPI TestClient wired to the fixture repository."""
    return TestClient(create_app(repository))
