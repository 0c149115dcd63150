"""
Selection Persistence Observer - writes the selection to storage on change.

The device system schedules this observer as a background task whenever
the selection changes, so the synchronous reconcile/notify path never
waits on storage I/O. Writes are serialized so an older selection can't
overwrite a newer one.
"""

import asyncio

from device_inventory.core.logging_utils import get_module_logger
from device_inventory.core.state_persistence import KeyValueStorage
from device_inventory.core.devices.selection import SelectionStore
from device_inventory.core.devices.types import Selection


class SelectionPersistenceObserver:
    """Persists each selection it is called with."""

    def __init__(self, storage: KeyValueStorage, selection_store: SelectionStore):
        self.logger = get_module_logger("SelectionPersistenceObserver")
        self._storage = storage
        self._selection_store = selection_store
        self._write_lock = asyncio.Lock()
        self.writes = 0

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    async def __call__(self, selection: Selection) -> bool:
        async with self._write_lock:
            success = await self._selection_store.save(self._storage, selection)
        if success:
            self.writes += 1
            self.logger.info("Persisted selection: %s", selection)
        else:
            self.logger.error("Failed to persist selection: %s", selection)
        return success
