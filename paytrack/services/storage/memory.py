"""
In-Memory Storage Implementation

Used in tests and as a throwaway store. Values are round-tripped through
JSON on every write and read, so callers see exactly what a persistent
backend would hand back (dates as strings, no shared mutable state).
"""

import json
from typing import Any, Optional

from paytrack.services.storage.interface import KeyValueStore, StorageError


class InMemoryKeyValueStore(KeyValueStore):
    """Key-value store backed by a dict of JSON documents."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[key] = self._encode(key, value)

    @staticmethod
    def _encode(key: str, value: Any) -> str:
        try:
            return json.dumps(value)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for '{key}' is not JSON serializable: {e}")

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = self._encode(key, value)

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self) -> list[str]:
        return list(self._data)

    def snapshot(self) -> dict[str, Any]:
        """Decoded copy of everything stored (for inspection in tests)."""
        return {key: json.loads(raw) for key, raw in self._data.items()}
