"""Read-only repository of reference data, built once at startup."""

import logging
import math
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from ..config import DataConfig
from ..errors import UnknownEquipmentType
from .index import Index, Record, build_class_spell_lists, build_index, merge_indexes, normalize
from .loader import DocumentLoader

logger = logging.getLogger(__name__)

STANDARD_HUMAN = "Standard Human"

# Starting-equipment choice type -> item predicate
EQUIPMENT_TYPE_FILTERS = {
    "weaponMartial": lambda i: i.get("weapon") and i.get("weaponCategory") == "martial",
    "weaponMartialMelee": lambda i: (
        i.get("weapon") and i.get("weaponCategory") == "martial" and i.get("type") == "M"
    ),
    "weaponMartialRanged": lambda i: (
        i.get("weapon") and i.get("weaponCategory") == "martial" and i.get("type") == "R"
    ),
    "weaponSimple": lambda i: i.get("weapon") and i.get("weaponCategory") == "simple",
    "weaponSimpleMelee": lambda i: (
        i.get("weapon") and i.get("weaponCategory") == "simple" and i.get("type") == "M"
    ),
    "weaponSimpleRanged": lambda i: (
        i.get("weapon") and i.get("weaponCategory") == "simple" and i.get("type") == "R"
    ),
    "focusSpellcastingArcane": lambda i: i.get("type") == "SCF" and i.get("scfType") == "arcane",
    "focusSpellcastingHoly": lambda i: i.get("type") == "SCF" and i.get("scfType") == "holy",
    "focusSpellcastingDruidic": lambda i: i.get("type") == "SCF" and i.get("scfType") == "druidic",
}


class ReferenceRepository:
    """Immutable name-keyed access to every reference document.

    Construct with :meth:`build` (from the data directory) or
    :meth:`from_documents` (from already parsed documents). All indexes are
    built in the constructor; afterwards the repository only serves reads.
    """

    def __init__(self, documents: Mapping[str, Mapping[str, Any]], config: DataConfig | None = None):
        self.config = config or DataConfig()
        self.files = self.config.files
        self._documents = MappingProxyType(dict(documents))
        self._indexes: dict[str, Index | None] = {}
        self.class_spell_lists: Mapping[str, frozenset[str]] | None = None
        self._build_indexes()

    @classmethod
    def build(cls, config: DataConfig) -> "ReferenceRepository":
        """Load every configured document from disk and index it."""
        loader = DocumentLoader(config.root)
        filenames = [
            config.files.races,
            config.files.spells,
            config.files.items,
            config.files.base_items,
            config.files.feats,
            config.files.backgrounds,
            config.files.skills,
            config.files.conditions,
            config.files.bestiary,
            config.files.variant_rules,
            config.files.actions,
            config.files.book,
            config.files.optional_features,
            config.files.senses,
        ]
        filenames.extend(config.class_file(name) for name in config.class_names)
        return cls(loader.load_all(filenames), config)

    @classmethod
    def from_documents(
        cls,
        documents: Mapping[str, Mapping[str, Any]],
        config: DataConfig | None = None,
    ) -> "ReferenceRepository":
        """Create a repository from parsed documents keyed by file name."""
        return cls(documents, config)

    # -- construction -----------------------------------------------------

    def _index_of(self, filename: str, key: str) -> Index | None:
        document = self._documents.get(filename)
        if document is None or not isinstance(document.get(key), list):
            return None
        return build_index(document[key])

    def _build_indexes(self) -> None:
        logger.info("Building indexes...")
        files = self.files

        self._indexes["spells"] = self._index_of(files.spells, "spell")
        self._indexes["conditions"] = self._index_of(files.conditions, "condition")
        self._indexes["skills"] = self._index_of(files.skills, "skill")
        self._indexes["backgrounds"] = self._index_of(files.backgrounds, "background")
        self._indexes["variantrules"] = self._index_of(files.variant_rules, "variantrule")
        self._indexes["actions"] = self._index_of(files.actions, "action")
        self._indexes["feats"] = self._index_of(files.feats, "feat")

        # Base items are more complete than general items and take precedence
        item_sources = [
            index for index in (
                self._index_of(files.base_items, "baseitem"),
                self._index_of(files.items, "item"),
            )
            if index is not None
        ]
        self._indexes["items"] = merge_indexes(*item_sources) if item_sources else None

        feature_sources = []
        for class_name in self.config.class_names:
            filename = self.config.class_file(class_name)
            for key in ("classFeature", "optionalfeature"):
                index = self._index_of(filename, key)
                if index is not None:
                    feature_sources.append(index)
        self._indexes["features"] = merge_indexes(*feature_sources) if feature_sources else None

        self.class_spell_lists = build_class_spell_lists(self._documents.get(files.book))

        for name, index in self._indexes.items():
            if index is None:
                logger.warning("Index %s unavailable", name)
            else:
                logger.info("Indexed %d %s", len(index), name)

    # -- raw access -------------------------------------------------------

    def index(self, category: str) -> Index | None:
        """Get a category index, or None when its source data is absent."""
        return self._indexes.get(category)

    def has_document(self, filename: str) -> bool:
        """Check whether a document loaded."""
        return filename in self._documents

    def document_records(self, filename: str, key: str) -> list[Record]:
        """Get the raw record array of a document (empty when absent)."""
        document = self._documents.get(filename)
        if document is None:
            return []
        records = document.get(key)
        return records if isinstance(records, list) else []

    def find_record(self, filename: str, key: str, name: str) -> Record | None:
        """Linear scan of a document for a record by normalized name."""
        wanted = normalize(name)
        for record in self.document_records(filename, key):
            if isinstance(record, dict) and normalize(record.get("name")) == wanted:
                return record
        return None

    def snapshot(self, categories: Iterable[str]) -> dict[str, dict[str, Record]]:
        """Copy the requested indexes into plain dictionaries."""
        return {
            category: dict(self._indexes.get(category) or {})
            for category in categories
        }

    def _is_source(self, record: Record) -> bool:
        return record.get("source") == self.config.source

    # -- races ------------------------------------------------------------

    def list_races(self) -> list[Record]:
        """Get all core rulebook races."""
        return [r for r in self.document_records(self.files.races, "race") if self._is_source(r)]

    def get_race(self, name: str) -> Record | None:
        """Get a core rulebook race by name."""
        wanted = normalize(name)
        for race in self.list_races():
            if normalize(race.get("name")) == wanted:
                return race
        return None

    def _subrace_name(self, subrace: Record) -> str:
        name = (subrace.get("name") or "").strip()
        if not name and subrace.get("raceName") == "Human":
            return STANDARD_HUMAN
        return name

    def list_subraces(self, race_name: str) -> list[Record]:
        """Get the core rulebook subraces of a race.

        An unnamed Human subrace is presented as "Standard Human".
        """
        subraces = []
        for subrace in self.document_records(self.files.races, "subrace"):
            if (
                subrace.get("raceName") == race_name
                and subrace.get("raceSource") == self.config.source
                and self._is_source(subrace)
            ):
                name = self._subrace_name(subrace)
                if name != (subrace.get("name") or ""):
                    subrace = {**subrace, "name": name}
                subraces.append(subrace)
        return subraces

    def get_subrace(self, name: str) -> Record | None:
        """Get a core rulebook subrace by name, including "Standard Human"."""
        wanted = normalize(name)
        for subrace in self.document_records(self.files.races, "subrace"):
            if not self._is_source(subrace):
                continue
            subrace_name = self._subrace_name(subrace)
            if normalize(subrace_name) == wanted:
                if subrace_name != (subrace.get("name") or ""):
                    return {**subrace, "name": subrace_name}
                return subrace
        return None

    # -- classes ----------------------------------------------------------

    def _class_document(self, class_name: str) -> Mapping[str, Any] | None:
        wanted = normalize(class_name)
        if wanted not in self.config.class_names:
            return None
        return self._documents.get(self.config.class_file(wanted))

    def get_class(self, name: str) -> Record | None:
        """Get a class record with its feature arrays attached.

        The stored record is not modified; a shallow copy is returned.
        """
        document = self._class_document(name)
        if not document or not document.get("class"):
            return None

        class_record = dict(document["class"][0])
        if document.get("classFeature"):
            class_record["classFeature"] = document["classFeature"]
        if document.get("subclassFeature"):
            class_record["subclassFeature"] = document["subclassFeature"]
        return class_record

    def list_classes(self) -> list[Record]:
        """Get all core rulebook classes."""
        classes = []
        for class_name in self.config.class_names:
            document = self._documents.get(self.config.class_file(class_name))
            if document and document.get("class") and self._is_source(document["class"][0]):
                classes.append(document["class"][0])
        return classes

    def list_subclasses(self, class_name: str) -> list[Record]:
        """Get the core rulebook subclasses of a class."""
        document = self._class_document(class_name)
        if not document:
            return []
        return [
            s for s in document.get("subclass") or []
            if normalize(s.get("className")) == normalize(class_name)
            and s.get("classSource") == self.config.source
            and self._is_source(s)
        ]

    def get_subclass(self, class_name: str, subclass_name: str) -> Record | None:
        """Get a subclass by class and subclass name."""
        for subclass in self.list_subclasses(class_name):
            if normalize(subclass.get("name")) == normalize(subclass_name):
                return subclass
        return None

    # -- backgrounds and feats -------------------------------------------

    def list_backgrounds(self) -> list[Record]:
        """Get all core rulebook backgrounds."""
        return [
            b for b in self.document_records(self.files.backgrounds, "background")
            if self._is_source(b)
        ]

    def get_background(self, name: str) -> Record | None:
        """Get a core rulebook background by name."""
        index = self.index("backgrounds")
        if index is not None:
            background = index.get(normalize(name))
            if background and self._is_source(background):
                return background
        for background in self.list_backgrounds():
            if normalize(background.get("name")) == normalize(name):
                return background
        return None

    def list_feats(self) -> list[Record]:
        """Get all core rulebook feats."""
        return [f for f in self.document_records(self.files.feats, "feat") if self._is_source(f)]

    def get_feat(self, name: str) -> Record | None:
        """Get a feat by name, from any source."""
        index = self.index("feats")
        if index is not None:
            return index.get(normalize(name))
        return self.find_record(self.files.feats, "feat", name)

    # -- spells and items -------------------------------------------------

    def spells_for_class(
        self,
        class_name: str,
        level: int = 1,
        spell_level: int | None = None,
    ) -> list[Record]:
        """Get the spells available to a class.

        Args:
            class_name: Class name, any capitalization
            level: Character level; bounds the spell level to ceil(level / 2)
            spell_level: Exact spell level to return instead

        Returns:
            Spells sorted by level, then name
        """
        spells = self.document_records(self.files.spells, "spell")

        spell_list = None
        if self.class_spell_lists is not None:
            spell_list = self.class_spell_lists.get(class_name[:1].upper() + class_name[1:].lower())
        if spell_list is not None:
            spells = [s for s in spells if s.get("name") in spell_list]

        if spell_level is not None:
            spells = [s for s in spells if s.get("level") == spell_level]
        else:
            max_spell_level = math.ceil(level / 2)
            spells = [s for s in spells if s.get("level", 0) <= max_spell_level]

        return sorted(spells, key=lambda s: (s.get("level", 0), s.get("name", "")))

    def combined_items(self) -> list[Record]:
        """Get base items followed by general items not already present."""
        base_items = self.document_records(self.files.base_items, "baseitem")
        base_names = {normalize(i.get("name")) for i in base_items}
        items = list(base_items)
        for item in self.document_records(self.files.items, "item"):
            if normalize(item.get("name")) not in base_names:
                items.append(item)
        return items

    def items_by_equipment_type(self, equipment_type: str) -> list[Record]:
        """Get the items matching a starting-equipment choice type.

        Raises:
            UnknownEquipmentType: The type is not supported
        """
        predicate = EQUIPMENT_TYPE_FILTERS.get(equipment_type)
        if predicate is None:
            raise UnknownEquipmentType(equipment_type)

        items = [
            item for item in self.combined_items()
            if predicate(item) and item.get("source") in (self.config.source, None)
        ]
        items.sort(key=lambda i: i.get("name") or "")
        logger.debug("Equipment type %s: found %d items", equipment_type, len(items))
        return items
