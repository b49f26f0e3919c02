"""Name-keyed lookup tables over reference documents."""

import logging
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from ..rules.text import spell_names_in

logger = logging.getLogger(__name__)

Record = dict[str, Any]
Index = Mapping[str, Record]

# Classes with a spell list in the core rulebook
SPELLCASTING_CLASSES = (
    "Bard",
    "Cleric",
    "Druid",
    "Paladin",
    "Ranger",
    "Sorcerer",
    "Warlock",
    "Wizard",
)


def normalize(name: Any) -> str:
    """Normalize a record name into an index key."""
    if not isinstance(name, str):
        return ""
    return name.strip().lower()


def record_name(record: Record) -> Any:
    """Default name extractor."""
    return record.get("name")


def build_index(
    records: Iterable[Record] | None,
    name_of: Callable[[Record], Any] = record_name,
) -> Index:
    """Build a case-insensitive name index over a list of records.

    Records without a name are skipped. Records carrying an ``alias`` list
    get an additional key per alias pointing at the same record. Within one
    source the first record for a key wins.

    Args:
        records: Raw records from a single source document
        name_of: Extracts the name from a record

    Returns:
        Read-only mapping of normalized name to record
    """
    index: dict[str, Record] = {}
    for record in records or []:
        if not isinstance(record, dict):
            continue
        key = normalize(name_of(record))
        if not key:
            continue
        index.setdefault(key, record)

        for alias in record.get("alias") or []:
            alias_key = normalize(alias)
            if alias_key:
                index.setdefault(alias_key, record)

    return MappingProxyType(index)


def merge_indexes(primary: Index, *fallbacks: Index) -> Index:
    """Merge indexes from overlapping sources.

    Entries of ``primary`` are inserted first and never overwritten; each
    fallback only fills keys that are still missing.
    """
    merged: dict[str, Record] = dict(primary)
    for fallback in fallbacks:
        for key, record in fallback.items():
            if key in merged:
                if merged[key] is not record:
                    logger.debug("Keeping higher-precedence record for %r", key)
                continue
            merged[key] = record
    return MappingProxyType(merged)


def build_class_spell_lists(
    book: Mapping[str, Any] | None,
    known_classes: Iterable[str] = SPELLCASTING_CLASSES,
) -> Mapping[str, frozenset[str]] | None:
    """Extract each class's spell list from the rulebook text.

    The book's ``Spells`` section holds one ``<Class> Spells`` block per
    class; every string item of the nested lists carries a ``{@spell Name}``
    tag.

    Returns:
        Mapping of class name to spell names, or None when the book or its
        Spells section is unavailable
    """
    if not book or not isinstance(book.get("data"), list):
        logger.warning("Rulebook not loaded, cannot build class spell lists")
        return None

    section = next(
        (
            s for s in book["data"]
            if isinstance(s, dict) and s.get("name") == "Spells" and s.get("type") == "section"
        ),
        None,
    )
    if not section or not section.get("entries"):
        logger.warning("Spells section not found in rulebook")
        return None

    spell_lists: dict[str, set[str]] = {name: set() for name in known_classes}

    for entry in section["entries"]:
        if not isinstance(entry, dict) or entry.get("type") != "entries":
            continue
        name = entry.get("name") or ""
        if not name.endswith(" Spells"):
            continue

        class_name = name[: -len(" Spells")].strip()
        if class_name not in spell_lists:
            logger.warning("Unknown class %r in spell lists", class_name)
            continue

        for block in entry.get("entries") or []:
            if not isinstance(block, dict) or block.get("type") != "list":
                continue
            for item in block.get("items") or []:
                spell_lists[class_name].update(spell_names_in(item))

    for class_name, spells in spell_lists.items():
        logger.info("%s spell list: %d spells", class_name, len(spells))

    return MappingProxyType(
        {class_name: frozenset(spells) for class_name, spells in spell_lists.items()}
    )
