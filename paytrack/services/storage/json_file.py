"""
JSON File Storage Implementation

DESIGN DECISION: The whole store is one JSON document on disk. Personal
finance data for one user is small, and a single file is trivial to back
up, inspect, and move between devices.

TRADEOFFS:
- Every write rewrites the file (fine at this size)
- No transactions: writes go to a temp file that replaces the original,
  so a crash leaves either the old or the new document, never half of one
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from paytrack.services.storage.interface import KeyValueStore, StorageError


logger = structlog.get_logger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """Key-value store persisted as a single JSON object in a file."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read store {self._path}: {e}")
        if not isinstance(data, dict):
            raise StorageError(f"Store {self._path} does not contain a JSON object")
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, indent=2, sort_keys=True)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.error("storage_write_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Failed to write store {self._path}: {e}")

    async def get(self, key: str) -> Optional[Any]:
        return self._load().get(key)

    async def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    async def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)

    async def keys(self) -> list[str]:
        return list(self._load())
