"""
Abstract Key-Value Storage Interface

DESIGN DECISION: All persistence goes through a tiny async key-value
interface. Each collection (settings, recurring payments, payment logs,
period balances) lives under one key as a JSON-compatible value and is
always read and written whole. This allows us to:
1. Run on whatever store the device offers
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

There is no retry: the store is local, and a failed write is reported to
the caller as a StorageError.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStore(ABC):
    """
    Abstract interface for the key-value store.

    Values are JSON-compatible (dict, list, str, int, float, bool, None).
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Read the value stored under a key.

        Args:
            key: Collection key

        Returns:
            The stored value, or None if the key was never written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """
        Replace the value stored under a key.

        Args:
            key: Collection key
            value: JSON-compatible value

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Remove a key. Removing a missing key is not an error.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def keys(self) -> list[str]:
        """
        List stored keys.

        Returns:
            Keys in no particular order
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SchemaVersionError(StorageError):
    """Stored data was written by a newer, unsupported schema."""

    def __init__(self, found: int, supported: int):
        self.found = found
        self.supported = supported
        super().__init__(
            f"Stored schema version {found} is newer than supported version {supported}"
        )
