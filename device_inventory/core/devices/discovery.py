"""
Discovery backend protocol and an in-memory backend.

A discovery backend detects devices and endpoints and drives an
InventoryStore through attach/detach diffs. Registration is explicit:
``backend.register(store)`` returns a Subscription whose ``dispose()``
detaches the backend from the store again.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, runtime_checkable

from device_inventory.core.logging_utils import get_module_logger
from .inventory import InventoryStore
from .notifier import Subscription
from .types import Device, Endpoint, InventoryChange, InventoryItem

logger = get_module_logger("Discovery")


@runtime_checkable
class DiscoveryBackend(Protocol):
    """Anything that can push inventory diffs into a store."""

    def register(self, store: InventoryStore) -> Subscription:
        """Start pushing changes into ``store`` until the handle is disposed."""
        ...


class InMemoryDiscoveryBackend:
    """
    Backend driven by explicit calls, for tests, simulations and replay.

    Usage:
        backend = InMemoryDiscoveryBackend()
        handle = backend.register(store)
        backend.attach(Device("Uno", "arduino:avr:uno", Endpoint("serial", "/dev/ttyACM0")))
        handle.dispose()
    """

    def __init__(self):
        self._store: Optional[InventoryStore] = None

    @property
    def store(self) -> Optional[InventoryStore]:
        return self._store

    def register(self, store: InventoryStore) -> Subscription:
        if self._store is not None and self._store is not store:
            logger.warning("Replacing registered inventory store")
        self._store = store

        def _deregister() -> None:
            if self._store is store:
                self._store = None

        return Subscription(_deregister)

    def _require_store(self) -> InventoryStore:
        if self._store is None:
            raise RuntimeError("No inventory store is registered with this backend")
        return self._store

    def attach(self, *items: InventoryItem) -> InventoryChange:
        return self._require_store().attach(*items)

    def detach(self, *items: InventoryItem) -> InventoryChange:
        return self._require_store().detach(*items)

    def apply_diff(
        self,
        to_attach: Iterable[InventoryItem] = (),
        to_detach: Iterable[InventoryItem] = (),
    ) -> InventoryChange:
        return self._require_store().apply_diff(to_attach, to_detach)

    def set_state(
        self,
        devices: Iterable[Device],
        endpoints: Iterable[Endpoint],
        *,
        silent: bool = False,
    ) -> InventoryChange:
        return self._require_store().set_state(devices, endpoints, silent=silent)

    def reset(self) -> InventoryChange:
        return self._require_store().reset(silent=True)

    def endpoint_for(self, device: Device) -> Endpoint:
        return self._require_store().endpoint_for(device)


__all__ = ["DiscoveryBackend", "InMemoryDiscoveryBackend"]
