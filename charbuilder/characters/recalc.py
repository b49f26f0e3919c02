"""Recalculation of a character's derived statistics.

Each request takes a generation token for its character. Only the result of
that character's newest request may be attached to it; older results are
discarded when they complete, and an aborted computation leaves the previous
statistics in place. Requests for different characters never supersede each
other.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Hashable

from ..data.repository import ReferenceRepository
from ..errors import ComputationAborted
from ..rules.calculator import calculate_stats
from ..rules.equipment import EquipmentExpander
from .models import CalculatedStats, Character

logger = logging.getLogger(__name__)


def character_key(character: Character) -> Hashable:
    """Key generation tokens by document id, or by object when unsaved."""
    if character.id:
        return ("id", character.id)
    return ("object", id(character))


class RecalcStatus(Enum):
    """Outcome of a recalculation request."""

    COMPUTED = "computed"
    ABORTED = "aborted"
    STALE = "stale"


@dataclass
class RecalcOutcome:
    """Result of one recalculation request."""

    status: RecalcStatus
    generation: int
    stats: CalculatedStats | None = None
    notice: str = ""

    @property
    def ok(self) -> bool:
        return self.status is RecalcStatus.COMPUTED


class StatsRecalculator:
    """Resolves a character's records and computes its statistics."""

    def __init__(self, repository: ReferenceRepository, expander: EquipmentExpander):
        self.repository = repository
        self.expander = expander
        self._generations = itertools.count(1)
        self._latest: dict[Hashable, int] = {}

    def latest_generation(self, character: Character) -> int:
        """The newest generation token handed out for a character, or 0."""
        return self._latest.get(character_key(character), 0)

    def begin(self, character: Character) -> int:
        """Start a new request, superseding the character's earlier ones."""
        generation = next(self._generations)
        self._latest[character_key(character)] = generation
        return generation

    def is_current(self, character: Character, generation: int) -> bool:
        """Check whether a generation token is still the character's newest."""
        return generation == self.latest_generation(character)

    def forget(self, character: Character) -> None:
        """Drop the token of a character that is no longer edited."""
        self._latest.pop(character_key(character), None)

    def resolve_records(self, character: Character) -> dict:
        """Look up the reference records a character's selections name."""
        return {
            "class_record": self.repository.get_class(character.class_name) if character.class_name else None,
            "race_record": self.repository.get_race(character.race) if character.race else None,
            "subrace_record": self.repository.get_subrace(character.subrace) if character.subrace else None,
            "background_record": (
                self.repository.get_background(character.background) if character.background else None
            ),
        }

    async def recalculate(self, character: Character, generation: int | None = None) -> RecalcOutcome:
        """Compute statistics for a character.

        Args:
            character: Character to compute for; it is not modified
            generation: Token from :meth:`begin`; a new one is taken if omitted

        Returns:
            The outcome; stats are only set when status is COMPUTED
        """
        if generation is None:
            generation = self.begin(character)

        records = self.resolve_records(character)
        expanded = await self.expander.expand(character.equipment)

        if not self.is_current(character, generation):
            logger.info(
                "Discarding stale recalculation %d (latest %d)", generation, self.latest_generation(character)
            )
            return RecalcOutcome(RecalcStatus.STALE, generation, notice="Superseded by a newer request")

        try:
            stats = calculate_stats(character, expanded_equipment=expanded, **records)
        except ComputationAborted as e:
            logger.info("Recalculation %d aborted: %s", generation, e)
            return RecalcOutcome(
                RecalcStatus.ABORTED,
                generation,
                notice=f"Statistics not updated. {e}",
            )

        return RecalcOutcome(RecalcStatus.COMPUTED, generation, stats=stats)

    def attach(self, character: Character, outcome: RecalcOutcome) -> bool:
        """Store a computed result on the character if it is still current.

        Returns:
            True if the character's statistics were replaced
        """
        if not outcome.ok or not self.is_current(character, outcome.generation):
            return False
        character.calculated_stats = outcome.stats
        return True

    async def refresh(self, character: Character) -> RecalcOutcome:
        """Recalculate and attach in one step."""
        outcome = await self.recalculate(character)
        self.attach(character, outcome)
        return outcome

    def refresh_sync(self, character: Character) -> RecalcOutcome:
        """Blocking variant of :meth:`refresh`."""
        return asyncio.run(self.refresh(character))
