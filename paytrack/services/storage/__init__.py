"""
Storage Services Package

Provides the abstract key-value interface and its implementations:
an in-memory store for tests and a JSON file store for the device.
"""

from paytrack.services.storage.interface import (
    KeyValueStore,
    SchemaVersionError,
    StorageError,
)
from paytrack.services.storage.json_file import JsonFileKeyValueStore
from paytrack.services.storage.memory import InMemoryKeyValueStore
from paytrack.services.storage.schema import (
    CURRENT_SCHEMA_VERSION,
    SCHEMA_VERSION_KEY,
    ensure_schema_version,
)

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "SchemaVersionError",
    "StorageError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    # Schema versioning
    "CURRENT_SCHEMA_VERSION",
    "SCHEMA_VERSION_KEY",
    "ensure_schema_version",
]
