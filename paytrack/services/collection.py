"""
Base class for services that keep one collection under one store key.

Every write is "read the full list, change it in memory, write the full
list back", then the new list is published to subscribers. Concurrent
writers to the same key therefore race at collection granularity and the
last write wins; the single-threaded event loop and one-action-at-a-time
UI make that acceptable.
"""

from typing import Callable, Generic, Optional, TypeVar

import structlog

from paytrack.models.base import RecordModel
from paytrack.services.notify import ChangeNotifier
from paytrack.services.storage.interface import KeyValueStore, StorageError


M = TypeVar("M", bound=RecordModel)


class CollectionService(Generic[M]):
    """Load, save and announce one list of records."""

    key: str = ""
    model: type[RecordModel] = RecordModel

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._notifier: ChangeNotifier[list[M]] = ChangeNotifier(self.key)
        self._logger = structlog.get_logger(type(self).__module__).bind(collection=self.key)

    def subscribe(self, listener: Callable[[list[M]], object]) -> Callable[[], None]:
        """Be told about the full collection after every write."""
        return self._notifier.subscribe(listener)

    async def _load(self) -> list[M]:
        raw = await self._store.get(self.key)
        if not raw:
            return []
        if not isinstance(raw, list):
            raise StorageError(f"Collection '{self.key}' is not a list")
        return [self.model.model_validate(item) for item in raw]

    async def _save(self, records: list[M]) -> None:
        await self._store.set(self.key, [record.to_storage() for record in records])
        await self._notifier.publish(list(records))

    @staticmethod
    def _index_of(records: list[M], record_id: str) -> Optional[int]:
        for idx, record in enumerate(records):
            if getattr(record, "id", None) == record_id:
                return idx
        return None
