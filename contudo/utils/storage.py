"""Snapshot storage backends for the ledger (JSON file or none)."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class NullStorage:
    """Storage that keeps nothing; data lives only for the process lifetime."""

    def load(self) -> dict[str, Any] | None:
        return None

    def save(self, snapshot: dict[str, Any]) -> bool:
        return True


class JsonFileStorage:
    """Write the whole ledger snapshot to one JSON document."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, Any] | None:
        """Read the snapshot, returning None when missing or unreadable."""
        if not self.path.exists():
            return None
        try:
            with self.path.open(encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError):
            logger.exception("Failed to load data file %s", self.path)
            return None
        if not isinstance(data, dict):
            logger.error("Ignoring data file %s: top-level value is not an object", self.path)
            return None
        logger.info("Loaded data file %s", self.path)
        return data

    def save(self, snapshot: dict[str, Any]) -> bool:
        """Write the snapshot; failures are logged and reported as False."""
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(snapshot, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            logger.exception("Failed to save data file %s", self.path)
            return False
        return True


def build_storage(data_file: str | None) -> NullStorage | JsonFileStorage:
    """Return the storage backend for the configured data file."""
    if not data_file:
        return NullStorage()
    return JsonFileStorage(data_file)
