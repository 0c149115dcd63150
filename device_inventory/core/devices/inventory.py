"""
Inventory Store - the live list of attached devices and endpoints.

Discovery backends drive the store through ``apply_diff`` (or the
``attach``/``detach`` shorthands). Each call is all-or-nothing: the diff
is applied to working copies and committed only when every item
succeeded, so a failed call leaves the store exactly as it was and fires
nothing. A successful call publishes one InventoryChange on
``on_changed``, no matter how many items it carried.
"""

from __future__ import annotations

import threading
from typing import Iterable, Optional

from device_inventory.core.logging_utils import get_module_logger
from .errors import EndpointInUseError, EndpointNotAvailableError, NotAttachedError
from .notifier import Channel
from .types import (
    Device,
    Endpoint,
    InventoryChange,
    InventoryItem,
    InventorySnapshot,
    ItemKind,
)

logger = get_module_logger("InventoryStore")


def _item_kind(item: InventoryItem) -> ItemKind:
    kind = getattr(item, "kind", None)
    if not isinstance(kind, ItemKind):
        raise TypeError(f"Expected a Device or Endpoint, got {item!r}")
    return kind


def _endpoint_index(endpoints: list[Endpoint], endpoint: Endpoint) -> int:
    for index, candidate in enumerate(endpoints):
        if candidate.same_as(endpoint):
            return index
    return -1


class InventoryStore:
    """
    Holds the current InventorySnapshot and applies attach/detach diffs.

    Args:
        lock: Re-entrant lock shared with the rest of the device system so
            that mutate -> reconcile -> publish runs as one unit. A private
            lock is created when omitted.
    """

    def __init__(self, lock: Optional[threading.RLock] = None):
        self._lock = lock or threading.RLock()
        self._state = InventorySnapshot()
        self.on_changed: Channel[InventoryChange] = Channel("inventory changed")

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def snapshot(self) -> InventorySnapshot:
        return self._state

    @property
    def devices(self) -> tuple[Device, ...]:
        return self._state.devices

    @property
    def endpoints(self) -> tuple[Endpoint, ...]:
        return self._state.endpoints

    def endpoint_for(self, device: Device) -> Endpoint:
        """Return the live endpoint the device is attached through."""
        if device.endpoint is None:
            raise ValueError(f"{device} does not have an endpoint")
        state = self._state
        for endpoint in state.endpoints:
            if endpoint.same_as(device.endpoint):
                return endpoint
        raise EndpointNotAvailableError(device.endpoint, state.endpoints)

    # =========================================================================
    # Mutations
    # =========================================================================

    def apply_diff(
        self,
        to_attach: Iterable[InventoryItem] = (),
        to_detach: Iterable[InventoryItem] = (),
    ) -> InventoryChange:
        """Attach then detach the given items and publish the change.

        Raises:
            NotAttachedError: a device to detach is not attached.
            EndpointNotAvailableError: an endpoint to detach (directly or via
                its device) is not available.
            EndpointInUseError: a bare endpoint was detached while an attached
                device still uses it.
            TypeError: an item is neither a Device nor an Endpoint.
        """
        to_attach = tuple(to_attach)
        to_detach = tuple(to_detach)

        with self._lock:
            old_state = self._state
            devices = list(old_state.devices)
            endpoints = list(old_state.endpoints)

            for item in to_attach:
                self._attach_item(item, devices, endpoints)
            for item in to_detach:
                self._detach_item(item, devices, endpoints, old_state)
            self._check_endpoints_in_use(devices, endpoints)

            new_state = InventorySnapshot(devices=tuple(devices), endpoints=tuple(endpoints))
            self._state = new_state

            for item in to_attach:
                logger.info("Attached %s", item)
            for item in to_detach:
                logger.info("Detached %s", item)

            change = InventoryChange(old_state=old_state, new_state=new_state)
            self.on_changed.fire(change)
            return change

    def attach(self, *items: InventoryItem) -> InventoryChange:
        return self.apply_diff(to_attach=items)

    def detach(self, *items: InventoryItem) -> InventoryChange:
        return self.apply_diff(to_detach=items)

    def set_state(
        self,
        devices: Iterable[Device],
        endpoints: Iterable[Endpoint],
        *,
        silent: bool = False,
    ) -> InventoryChange:
        """Replace the whole inventory.

        Every device endpoint must be present in ``endpoints``.
        """
        new_state = InventorySnapshot(devices=tuple(devices), endpoints=tuple(endpoints))
        for device in new_state.devices:
            if device.endpoint is not None and not new_state.has_endpoint(device.endpoint):
                raise EndpointNotAvailableError(device.endpoint, new_state.endpoints)

        with self._lock:
            change = InventoryChange(old_state=self._state, new_state=new_state)
            self._state = new_state
            logger.debug(
                "Inventory replaced: %d devices, %d endpoints%s",
                len(new_state.devices),
                len(new_state.endpoints),
                " (silent)" if silent else "",
            )
            if not silent:
                self.on_changed.fire(change)
            return change

    def reset(self, *, silent: bool = True) -> InventoryChange:
        """Clear devices and endpoints; silent by default for initialization."""
        return self.set_state((), (), silent=silent)

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _attach_item(item: InventoryItem, devices: list[Device], endpoints: list[Endpoint]) -> None:
        kind = _item_kind(item)
        if kind is ItemKind.DEVICE:
            # Endpoint first so the device never references a missing endpoint
            if item.endpoint is not None:
                endpoints.append(item.endpoint)
            devices.append(item)
        else:
            endpoints.append(item)

    @staticmethod
    def _check_endpoints_in_use(devices: list[Device], endpoints: list[Endpoint]) -> None:
        for device in devices:
            if device.endpoint is None:
                continue
            if _endpoint_index(endpoints, device.endpoint) == -1:
                users = [d for d in devices if d.has_endpoint(device.endpoint)]
                raise EndpointInUseError(device.endpoint, users)

    @staticmethod
    def _detach_item(
        item: InventoryItem,
        devices: list[Device],
        endpoints: list[Endpoint],
        old_state: InventorySnapshot,
    ) -> None:
        kind = _item_kind(item)
        if kind is ItemKind.DEVICE:
            try:
                devices.remove(item)
            except ValueError:
                raise NotAttachedError(item, old_state.devices) from None
            if item.endpoint is not None:
                index = _endpoint_index(endpoints, item.endpoint)
                if index == -1:
                    raise EndpointNotAvailableError(item.endpoint, old_state.endpoints)
                del endpoints[index]
        else:
            index = _endpoint_index(endpoints, item)
            if index == -1:
                raise EndpointNotAvailableError(item, old_state.endpoints)
            del endpoints[index]


__all__ = ["InventoryStore"]
