"""Unit tests for SelectionPersistenceObserver."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from device_inventory.core.devices import Device, Endpoint, Selection, SelectionStore
from device_inventory.core.devices.selection import LATEST_SELECTION_KEY
from device_inventory.core.observers import SelectionPersistenceObserver
from device_inventory.core.state_persistence import InMemoryStorage


def run_async(coro):
    """Run async coroutine synchronously for testing."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class TestSelectionPersistenceObserver:
    """Tests for persisting selections through the observer."""

    def test_writes_selection(self):
        storage = InMemoryStorage()
        observer = SelectionPersistenceObserver(storage, SelectionStore())
        selection = Selection(selected_device=Device(name="Uno"), selected_endpoint=Endpoint("serial", "COM3"))

        assert run_async(observer(selection))

        assert observer.writes == 1
        assert observer.storage is storage
        assert Selection.from_dict(run_async(storage.get(LATEST_SELECTION_KEY))) == selection

    def test_failed_write_not_counted(self):
        storage = MagicMock()
        storage.set = AsyncMock(side_effect=OSError("read-only"))
        observer = SelectionPersistenceObserver(storage, SelectionStore())

        assert run_async(observer(Selection())) is False
        assert observer.writes == 0

    def test_concurrent_writes_keep_call_order(self):
        order = []

        async def slow_set(key, value):
            if key == LATEST_SELECTION_KEY:
                order.append(value["selected_device"]["name"])
            await asyncio.sleep(0)

        storage = MagicMock()
        storage.set = AsyncMock(side_effect=slow_set)
        observer = SelectionPersistenceObserver(storage, SelectionStore())

        async def scenario():
            await asyncio.gather(
                observer(Selection(selected_device=Device(name="first"))),
                observer(Selection(selected_device=Device(name="second"))),
            )

        run_async(scenario())

        assert order == ["first", "second"]
        assert observer.writes == 2
