"""Error taxonomy for the rules-resolution engine."""

from pathlib import Path


class CharBuilderError(Exception):
    """Base class for all character builder errors."""


class DataUnavailable(CharBuilderError):
    """A reference document is missing or cannot be parsed."""

    def __init__(self, path: Path | str, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class ComputationAborted(CharBuilderError):
    """Mandatory inputs to the stats calculator are missing."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required data: {', '.join(self.missing)}")


class UnknownEquipmentType(CharBuilderError, ValueError):
    """An unsupported starting-equipment type was requested."""

    def __init__(self, equipment_type: str):
        self.equipment_type = equipment_type
        super().__init__(f"Unknown equipment type: {equipment_type}")
