"""Loader for reference rule documents."""

import json
import logging
from pathlib import Path
from typing import Any

from ..errors import DataUnavailable

logger = logging.getLogger(__name__)


class DocumentLoader:
    """Reads JSON rule documents from a data directory, caching each one."""

    def __init__(self, root: Path | str | None = None):
        """Initialize document loader.

        Args:
            root: Path to the reference data directory
        """
        if root:
            self.root = Path(root)
        else:
            self.root = Path("data")

        self._cache: dict[str, dict[str, Any]] = {}

    def read(self, filename: str) -> dict[str, Any]:
        """Load a JSON document, raising if it is missing or corrupt.

        Args:
            filename: Path relative to the data root

        Returns:
            Parsed document

        Raises:
            DataUnavailable: The file does not exist or is not a JSON object
        """
        if filename in self._cache:
            return self._cache[filename]

        file_path = self.root / filename
        if not file_path.exists():
            raise DataUnavailable(file_path, "file not found")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DataUnavailable(file_path, str(e)) from e

        if not isinstance(data, dict):
            raise DataUnavailable(file_path, "top level is not an object")

        self._cache[filename] = data
        return data

    def load(self, filename: str) -> dict[str, Any] | None:
        """Load a JSON document, logging and returning None if unavailable."""
        try:
            return self.read(filename)
        except DataUnavailable as e:
            logger.warning("Reference data unavailable: %s", e)
            return None

    def load_all(self, filenames: list[str]) -> dict[str, dict[str, Any]]:
        """Preload several documents.

        Returns:
            Mapping of file name to document, for the files that loaded
        """
        logger.info("Preloading %d reference documents from %s", len(filenames), self.root)
        documents = {}
        for filename in filenames:
            data = self.load(filename)
            if data is not None:
                documents[filename] = data
        logger.info("Loaded %d/%d reference documents", len(documents), len(filenames))
        return documents
