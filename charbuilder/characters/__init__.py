"""Character models and stats recalculation."""

from .models import AbilityScores, CalculatedStats, Character, ProficiencyStat

__all__ = ["AbilityScores", "CalculatedStats", "Character", "ProficiencyStat"]
