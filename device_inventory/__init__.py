"""Live device inventory reconciled against a persisted device selection."""

from __future__ import annotations

from importlib import metadata

from .core.devices import (
    AvailableDevice,
    Classification,
    Device,
    DeviceInventory,
    Endpoint,
    InMemoryDiscoveryBackend,
    InventorySnapshot,
    Selection,
    compute_available,
)

try:
    __version__ = metadata.version("device-inventory")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"


__all__ = [
    "__version__",
    "AvailableDevice",
    "Classification",
    "Device",
    "DeviceInventory",
    "Endpoint",
    "InMemoryDiscoveryBackend",
    "InventorySnapshot",
    "Selection",
    "compute_available",
]
