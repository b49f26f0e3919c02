"""Expansion of starting-equipment packs into their contents."""

import asyncio
import logging
import re
from typing import Any

from ..data.index import Record
from .resolver import Category, TagResolver, is_not_found

logger = logging.getLogger(__name__)

CHILD_PREFIX = "  └─ "

KNOWN_PACKS = (
    "scholar's pack",
    "explorer's pack",
    "dungeoneer's pack",
    "priest's pack",
    "diplomat's pack",
    "entertainer's pack",
    "burglar's pack",
)

_PARENTHESES = re.compile(r"\(.*\)")


def is_pack(entry: str) -> bool:
    """Check whether an equipment entry names a pack."""
    if entry.startswith(CHILD_PREFIX):
        return False
    lowered = entry.lower()
    return "pack" in lowered or any(pack in lowered for pack in KNOWN_PACKS)


def pack_variants(entry: str) -> list[str]:
    """Get the progressively looser names to look a pack up under."""
    variants = []
    for variant in (entry, _PARENTHESES.sub("", entry).strip(), entry.split("(")[0].strip()):
        if variant and variant not in variants:
            variants.append(variant)
    return variants


def format_content(content: Any) -> str | None:
    """Render one entry of a pack's contents as a child line."""
    if isinstance(content, str):
        return f"{CHILD_PREFIX}{content}"
    if not isinstance(content, dict):
        return None

    if content.get("item"):
        item = content["item"]
        name = item.split("|")[0] if isinstance(item, str) else str(item)
        quantity = f" ({content['quantity']})" if content.get("quantity") else ""
        return f"{CHILD_PREFIX}{name}{quantity}"
    if content.get("special"):
        return f"{CHILD_PREFIX}{content['special']}"
    return None


class EquipmentExpander:
    """Opens pack entries of an equipment list into indented item lines."""

    def __init__(self, resolver: TagResolver):
        self.resolver = resolver

    def find_pack(self, entry: str) -> Record | None:
        """Look a pack up under each variant of its name.

        Returns:
            The first record found that exposes a contents list
        """
        for variant in pack_variants(entry):
            record = self.resolver.resolve(Category.ITEM, variant)
            if not is_not_found(record) and isinstance(record.get("contents"), list):
                return record
        return None

    def expand_entry(self, entry: str) -> list[str]:
        """Expand a single equipment entry.

        Returns:
            The entry followed by one child line per pack content; just the
            entry when it is not a pack or the pack cannot be found
        """
        if not is_pack(entry):
            return [entry]

        pack = self.find_pack(entry)
        if pack is None:
            logger.debug("Pack %r not found, keeping entry as-is", entry)
            return [entry]

        lines = [entry]
        for content in pack["contents"]:
            line = format_content(content)
            if line is not None:
                lines.append(line)
        return lines

    async def _expand_entry_async(self, entry: str) -> list[str]:
        try:
            return await asyncio.to_thread(self.expand_entry, entry)
        except Exception as e:
            logger.warning("Error expanding pack %r: %s", entry, e)
            return [entry]

    async def expand(self, equipment: list[str]) -> list[str]:
        """Expand every entry concurrently, keeping the input order."""
        results = await asyncio.gather(
            *(self._expand_entry_async(entry) for entry in equipment or [])
        )
        expanded: list[str] = []
        for lines in results:
            expanded.extend(lines)
        return expanded

    def expand_sync(self, equipment: list[str]) -> list[str]:
        """Expand entries one after another without an event loop."""
        expanded: list[str] = []
        for entry in equipment or []:
            expanded.extend(self.expand_entry(entry))
        return expanded
