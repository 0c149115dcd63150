"""
Device inventory and selection reconciliation.

This package tracks attached devices and endpoints, holds the user's
selection, and derives the classified available-devices view.
"""

from .types import (
    AvailableDevice,
    Classification,
    Device,
    Endpoint,
    InventoryChange,
    InventoryDiff,
    InventoryItem,
    InventorySnapshot,
    ItemKind,
    Selection,
)
from .errors import (
    DeviceInventoryError,
    EndpointInUseError,
    EndpointNotAvailableError,
    InventoryError,
    NotAttachedError,
    SelectionFormatError,
)
from .notifier import Channel, Subscription, SubscriptionCollection
from .inventory import InventoryStore
from .reconcile import can_upload_to, can_verify, compute_available, find_selected
from .selection import SelectionStore
from .catalog import CatalogEntry, DEFAULT_CATALOG, identify_usb_device
from .discovery import DiscoveryBackend, InMemoryDiscoveryBackend
from .serial_scanner import SerialPortScanner
from .device_system import DeviceInventory

__all__ = [
    # Model
    "AvailableDevice",
    "Classification",
    "Device",
    "Endpoint",
    "InventoryChange",
    "InventoryDiff",
    "InventoryItem",
    "InventorySnapshot",
    "ItemKind",
    "Selection",
    # Errors
    "DeviceInventoryError",
    "EndpointInUseError",
    "EndpointNotAvailableError",
    "InventoryError",
    "NotAttachedError",
    "SelectionFormatError",
    # Notifier
    "Channel",
    "Subscription",
    "SubscriptionCollection",
    # Stores and reconciliation
    "InventoryStore",
    "SelectionStore",
    "can_upload_to",
    "can_verify",
    "compute_available",
    "find_selected",
    # Discovery
    "CatalogEntry",
    "DEFAULT_CATALOG",
    "DiscoveryBackend",
    "InMemoryDiscoveryBackend",
    "SerialPortScanner",
    "identify_usb_device",
    # Facade
    "DeviceInventory",
]
