"""Exceptions raised by the device inventory core."""

from __future__ import annotations

from typing import Any, Iterable


class DeviceInventoryError(Exception):
    """Base class for all device_inventory errors."""


class InventoryError(DeviceInventoryError):
    """An inventory diff could not be applied; the store is unchanged."""

    def __init__(self, message: str, item: Any = None, current: Iterable[Any] = ()):
        self.item = item
        self.current = tuple(current)
        super().__init__(message)


class NotAttachedError(InventoryError):
    """Detach was requested for a device that is not currently tracked."""

    def __init__(self, device: Any, current: Iterable[Any] = ()):
        current = tuple(current)
        super().__init__(
            f"{device} is not attached. Devices were: {[str(d) for d in current]}",
            item=device,
            current=current,
        )


class EndpointNotAvailableError(InventoryError):
    """An endpoint to remove (or look up) is not currently tracked."""

    def __init__(self, endpoint: Any, current: Iterable[Any] = ()):
        current = tuple(current)
        super().__init__(
            f"{endpoint} is not available. Endpoints were: {[str(e) for e in current]}",
            item=endpoint,
            current=current,
        )


class EndpointInUseError(InventoryError):
    """A diff would remove an endpoint that an attached device still uses."""

    def __init__(self, endpoint: Any, devices: Iterable[Any] = ()):
        devices = tuple(devices)
        super().__init__(
            f"{endpoint} is still used by {[str(d) for d in devices]}; detach the device instead",
            item=endpoint,
            current=devices,
        )


class SelectionFormatError(DeviceInventoryError):
    """A persisted selection could not be decoded."""


__all__ = [
    "DeviceInventoryError",
    "EndpointInUseError",
    "EndpointNotAvailableError",
    "InventoryError",
    "NotAttachedError",
    "SelectionFormatError",
]
