"""
Device Inventory - facade wiring the device components together.

This module provides a single entry point (DeviceInventory) that wires:
- InventoryStore (live devices and endpoints)
- SelectionStore (the user's selection)
- compute_available (reconciliation)
- Change channels for the application layer
- SelectionPersistenceObserver (optional storage)

Usage:
    inventory = DeviceInventory(storage=JsonFileStorage(path))
    await inventory.load_state()

    backend = InMemoryDiscoveryBackend()
    inventory.connect(backend)

    inventory.on_available_changed.subscribe(render_picker)
    inventory.select(device, endpoint)
    inventory.can_verify()

Thread Safety:
    Every mutation runs mutate -> reconcile -> publish under one
    re-entrant lock, so listeners never observe a half-applied change
    and may read the facade from inside a callback. Inventory and
    selection updates may come from different threads.
"""

from __future__ import annotations

import threading
from typing import Iterable, Optional

from device_inventory.core.asyncio_utils import BackgroundTasks
from device_inventory.core.config_manager import DeviceInventoryConfig
from device_inventory.core.logging_utils import get_module_logger
from device_inventory.core.state_persistence import JsonFileStorage, KeyValueStorage
from .discovery import DiscoveryBackend
from .inventory import InventoryStore
from .notifier import Channel, Subscription, SubscriptionCollection
from .reconcile import can_upload_to, can_verify, compute_available
from .selection import SelectionStore, load_endpoint_hint
from .types import (
    AvailableDevice,
    Device,
    Endpoint,
    InventoryChange,
    InventoryDiff,
    InventorySnapshot,
    Selection,
)

logger = get_module_logger("DeviceInventory")


class DeviceInventory:
    """
    Unified facade over inventory, selection and reconciliation.

    Channels:
        on_inventory_changed: InventoryChange after every applied diff.
        on_selection_changed: Selection after every selection update.
        on_available_changed: the new available tuple after every
            reconciliation pass.
    """

    def __init__(
        self,
        config: Optional[DeviceInventoryConfig] = None,
        storage: Optional[KeyValueStorage] = None,
    ):
        self._config = config or DeviceInventoryConfig(state_file=None)
        self._lock = threading.RLock()

        # Core components
        self.inventory = InventoryStore(self._lock)
        self.selection_store = SelectionStore(self._lock)

        # Application-facing channels
        self.on_inventory_changed: Channel[InventoryChange] = Channel("inventory changed")
        self.on_selection_changed: Channel[Selection] = Channel("selection changed")
        self.on_available_changed: Channel[tuple[AvailableDevice, ...]] = Channel("available changed")

        self._available: tuple[AvailableDevice, ...] = ()

        # str(endpoint) -> device last selected there
        self._hints: dict[str, Device] = {}

        # Persistence (optional). Imported lazily: the observers package
        # imports from this package.
        self._storage = storage
        self._persistence = None
        if storage is not None:
            from device_inventory.core.observers.selection_persistence import SelectionPersistenceObserver
            self._persistence = SelectionPersistenceObserver(storage, self.selection_store)
        self._tasks = BackgroundTasks(logger)

        self._subscriptions = SubscriptionCollection([
            self.inventory.on_changed.subscribe(self._handle_inventory_changed),
            self.selection_store.on_changed.subscribe(self._handle_selection_changed),
        ])

    @classmethod
    def from_config(cls, config: DeviceInventoryConfig) -> "DeviceInventory":
        """Create a facade persisting to ``config.state_file`` (if set)."""
        storage = JsonFileStorage(config.state_file) if config.state_file else None
        return cls(config=config, storage=storage)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def config(self) -> DeviceInventoryConfig:
        return self._config

    @property
    def storage(self) -> Optional[KeyValueStorage]:
        return self._storage

    def available_devices(self) -> tuple[AvailableDevice, ...]:
        """Current available devices (replaced wholesale on every change)."""
        return self._available

    def snapshot(self) -> InventorySnapshot:
        return self.inventory.snapshot

    def selected_device(self) -> Optional[AvailableDevice]:
        for entry in self._available:
            if entry.selected:
                return entry
        return None

    @property
    def endpoint_hints(self) -> dict[str, Device]:
        return dict(self._hints)

    @property
    def selection(self) -> Selection:
        return self.selection_store.selection

    @selection.setter
    def selection(self, value: Selection) -> None:
        self.selection_store.set(value)

    def can_verify(self, selection: Optional[Selection] = None) -> bool:
        """True when ``selection`` (default: current) is backed by a live endpoint."""
        with self._lock:
            target = selection if selection is not None else self.selection
            return can_verify(target, self.inventory.snapshot, self._active_hints())

    def can_upload_to(self, selection: Optional[Selection] = None) -> bool:
        return can_upload_to(selection if selection is not None else self.selection)

    # =========================================================================
    # Commands
    # =========================================================================

    def select(self, device: Optional[Device] = None, endpoint: Optional[Endpoint] = None) -> Selection:
        return self.selection_store.select(device, endpoint)

    def connect(self, backend: DiscoveryBackend) -> Subscription:
        """Register the inventory store with a discovery backend."""
        handle = backend.register(self.inventory)
        self._subscriptions.push(handle)
        logger.info("Discovery backend connected: %s", type(backend).__name__)
        return handle

    def refresh(self) -> tuple[AvailableDevice, ...]:
        """Re-run reconciliation and publish the result."""
        return self._reconcile()

    def dispose(self) -> None:
        self._subscriptions.dispose()

    # =========================================================================
    # Persistence
    # =========================================================================

    async def load_state(self) -> Selection:
        """Restore the persisted selection and publish the reconciled view."""
        if self._storage is None:
            return self.selection
        selection = await self.selection_store.load(self._storage)
        if not await self.refresh_hints():
            self._reconcile()
        return selection

    async def save_state(self) -> bool:
        if self._persistence is None:
            return False
        return await self._persistence(self.selection)

    async def refresh_hints(self, endpoints: Optional[Iterable[Endpoint]] = None) -> bool:
        """Load remembered devices for ``endpoints`` (default: all live ones).

        Returns True when new hints were found (and the view was refreshed).
        """
        if self._storage is None or not self._config.guess_from_history:
            return False
        targets = tuple(endpoints) if endpoints is not None else self.inventory.endpoints
        found = False
        for endpoint in targets:
            if str(endpoint) in self._hints:
                continue
            device = await load_endpoint_hint(self._storage, endpoint)
            if device is not None:
                with self._lock:
                    self._hints.setdefault(str(endpoint), device)
                found = True
        if found:
            self._reconcile()
        return found

    async def flush(self) -> None:
        """Wait for scheduled persistence and hint lookups to finish."""
        await self._tasks.drain()

    # =========================================================================
    # Internals
    # =========================================================================

    def _active_hints(self) -> Optional[dict[str, Device]]:
        return self._hints if self._config.guess_from_history else None

    def _reconcile(self) -> tuple[AvailableDevice, ...]:
        with self._lock:
            available = compute_available(
                self.inventory.snapshot,
                self.selection_store.selection,
                self._active_hints(),
            )
            self._available = available
            logger.debug(
                "Reconciled %d available devices: %s",
                len(available),
                ", ".join(f"{entry.name or '<unknown>'}={entry.state.value}" for entry in available) or "-",
            )
            self.on_available_changed.fire(available)
            return available

    def _handle_inventory_changed(self, change: InventoryChange) -> None:
        self.on_inventory_changed.fire(change)
        diff = change.diff()
        # A reconnect sets the selection, which reconciles on its own
        if not (self._config.auto_reconnect and self._try_reconnect(change.new_state, diff)):
            self._reconcile()
        if diff.attached_endpoints and self._storage is not None and self._config.guess_from_history:
            self._tasks.schedule(self.refresh_hints(diff.attached_endpoints), "endpoint hint lookup")

    def _handle_selection_changed(self, selection: Selection) -> None:
        device, endpoint = selection.selected_device, selection.selected_endpoint
        if device is not None and endpoint is not None and self._config.guess_from_history:
            self._hints[str(endpoint)] = device.without_endpoint()
        self.on_selection_changed.fire(selection)
        self._reconcile()
        if self._persistence is not None:
            self._tasks.schedule(self._persistence(selection), "selection persistence")

    def _try_reconnect(self, state: InventorySnapshot, diff: InventoryDiff) -> bool:
        """Restore the latest valid selection when its device shows up again."""
        latest = self.selection_store.latest_valid
        current = self.selection
        if latest is None or not diff.attached_devices:
            return False
        if can_upload_to(current) and state.has_endpoint(current.selected_endpoint):
            return False

        candidates = [d for d in diff.attached_devices if d.endpoint is not None]
        match = next(
            (d for d in candidates
             if d.same_identity(latest.selected_device) and d.has_endpoint(latest.selected_endpoint)),
            None,
        )
        if match is None:
            # The device may come back on a different endpoint
            match = next((d for d in candidates if d.same_identity(latest.selected_device)), None)
        if match is None:
            return False

        target = Selection(selected_device=latest.selected_device, selected_endpoint=match.endpoint)
        if target == current:
            return False
        logger.info("Reconnecting to %s", target)
        self.selection_store.set(target)
        return True


__all__ = ["DeviceInventory"]
