"""
Schema version guard.

The store records which version of the record shapes wrote it. Opening a
store written by a newer version fails loudly instead of misreading
records whose fields have changed meaning.
"""

import structlog

from paytrack.services.storage.interface import (
    KeyValueStore,
    SchemaVersionError,
    StorageError,
)


SCHEMA_VERSION_KEY = "schema_version"
CURRENT_SCHEMA_VERSION = 1

logger = structlog.get_logger(__name__)


async def ensure_schema_version(
    store: KeyValueStore,
    supported: int = CURRENT_SCHEMA_VERSION,
) -> int:
    """
    Check and stamp the schema version of a store.

    A store without a version (fresh, or written before versioning) is
    stamped with the supported version.

    Returns:
        The version the store is at after the check

    Raises:
        SchemaVersionError: If the store is newer than supported
        StorageError: If the stored version is not a number
    """
    found = await store.get(SCHEMA_VERSION_KEY)
    if found is None:
        await store.set(SCHEMA_VERSION_KEY, supported)
        logger.info("schema_version_stamped", version=supported)
        return supported

    try:
        found = int(found)
    except (TypeError, ValueError):
        raise StorageError(f"Stored schema version is not a number: {found!r}")
    if found > supported:
        raise SchemaVersionError(found=found, supported=supported)
    return found
