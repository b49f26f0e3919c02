"""Parsing for `{@type name|source|...}` tags embedded in rule text."""

import re
from dataclasses import dataclass

TAG_PATTERN = re.compile(r"\{@([^}]+)\}")
SPELL_TAG = re.compile(r"\{@spell\s+([^}|]+)")
ITEM_TAG = re.compile(r"\{@item\s+([^|}]+)")

TAG_TYPES = (
    "spell", "item", "skill", "condition", "action", "filter", "book", "class",
    "race", "feat", "optionalfeature", "language", "damage", "dice", "dc", "hit",
    "atk", "object", "creature", "monster", "background", "variantrule",
)

_STRIP_TYPE = re.compile(
    r"^(" + "|".join(TAG_TYPES + ("h", "m")) + r")\s+(.+)$", re.IGNORECASE
)
_EXTRACT_TYPE = re.compile(
    r"^(" + "|".join(TAG_TYPES + ("5etools", "chapter")) + r")(?:\s+(.+))?$",
    re.IGNORECASE,
)
_FILTER_TARGET = re.compile(
    r"(spell|item|class|race|feat|condition|skill|background|monster|creature|variantrule)",
    re.IGNORECASE,
)

# Tag types that never point at a resolvable entity
SKIPPED_TYPES = {"5etools", "book", "chapter"}

DEFAULT_VARIANT_RULE = "optional class features"


@dataclass(frozen=True)
class Tag:
    """A reference tag found in rule text."""

    type: str
    name: str
    full: str


def _strip_one(match: re.Match) -> str:
    parts = match.group(1).split("|")
    name_part = parts[0].strip()

    # {@i ...} is an italic marker
    if name_part == "i":
        return ""
    if name_part.startswith("i "):
        return name_part[2:]

    typed = _STRIP_TYPE.match(name_part)
    if typed:
        return typed.group(2)

    if name_part.lower().startswith("variantrule"):
        if len(parts) > 1:
            return parts[1].strip()
        return DEFAULT_VARIANT_RULE

    return name_part


def strip_tags(text: str) -> str:
    """Replace every tag with its display name."""
    if not isinstance(text, str):
        return text
    return TAG_PATTERN.sub(_strip_one, text)


def _is_spell_list_reference(name: str) -> bool:
    lowered = name.lower()
    return "list" in lowered or "spells" in lowered


def extract_tags(text: str) -> list[Tag]:
    """Extract all resolvable tags from rule text, in order of appearance."""
    if not isinstance(text, str):
        return []

    tags: list[Tag] = []
    for match in TAG_PATTERN.finditer(text):
        content = match.group(1)
        parts = content.split("|")
        first = parts[0].strip()

        if first == "h":
            tags.append(Tag("hit", "Hit", match.group(0)))
            continue
        if first == "m":
            tags.append(Tag("miss", "Miss", match.group(0)))
            continue
        if first == "i" or first.startswith("i "):
            continue

        typed = _EXTRACT_TYPE.match(first)
        if not typed:
            if first and not first.isdigit() and "=" not in first:
                tags.append(Tag("unknown", first, match.group(0)))
            continue

        tag_type = typed.group(1).lower()
        name = (typed.group(2) or "").strip()

        if tag_type in SKIPPED_TYPES:
            continue
        if tag_type == "spell" and _is_spell_list_reference(name):
            continue

        if tag_type == "filter":
            target = _FILTER_TARGET.search(name)
            if not target:
                continue
            tag_type = target.group(1).lower()

        if tag_type == "variantrule" and not name:
            if len(parts) > 1:
                name = parts[1].strip()
            name = name or DEFAULT_VARIANT_RULE

        if not name:
            name = "Hit" if tag_type == "hit" else tag_type

        tags.append(Tag(tag_type, name, match.group(0)))

    return tags


def parse_item_name(text: str) -> str:
    """Get the item name from `{@item name|source}` markup or plain text."""
    if not isinstance(text, str):
        return text
    match = ITEM_TAG.search(text)
    if match:
        return match.group(1).strip()
    return strip_tags(text)


def spell_names_in(text: str) -> list[str]:
    """Get the names of every `{@spell ...}` tag in a string."""
    if not isinstance(text, str):
        return []
    return [m.group(1).strip() for m in SPELL_TAG.finditer(text)]
