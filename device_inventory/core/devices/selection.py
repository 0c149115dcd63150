"""
Selection Store - observable holder of the user's device selection.

Setting ``selection`` stores the value and notifies ``on_changed``; no
validation is done, so a selection naming hardware that is not attached
is accepted as-is (that is the INCOMPLETE case downstream).

Persistence keys::

    latest-selection                        last selection, valid or not
    latest-valid-selection                  last selection with a catalog device and endpoint
    last-selected-device-on-endpoint:<ep>   device last chosen for endpoint <ep>
"""

from __future__ import annotations

import threading
from typing import Any, Optional

from device_inventory.core.logging_utils import get_module_logger
from device_inventory.core.state_persistence import KeyValueStorage
from .errors import SelectionFormatError
from .notifier import Channel
from .reconcile import can_upload_to
from .types import Device, Endpoint, Selection

logger = get_module_logger("SelectionStore")

LATEST_SELECTION_KEY = "latest-selection"
LATEST_VALID_SELECTION_KEY = "latest-valid-selection"
ENDPOINT_HINT_KEY_PREFIX = "last-selected-device-on-endpoint:"


def endpoint_hint_key(endpoint: Endpoint) -> str:
    return f"{ENDPOINT_HINT_KEY_PREFIX}{endpoint}"


def decode_selection(data: Any) -> Selection:
    """Decode a stored selection; absent or corrupt data yields an empty Selection."""
    if data is None:
        return Selection()
    try:
        return Selection.from_dict(data)
    except SelectionFormatError as e:
        logger.warning("Ignoring corrupt persisted selection: %s", e)
        return Selection()


class SelectionStore:
    """
    Holds the current Selection and the latest valid one.

    Args:
        lock: Re-entrant lock shared with the inventory store.
    """

    def __init__(self, lock: Optional[threading.RLock] = None):
        self._lock = lock or threading.RLock()
        self._selection = Selection()
        self._latest_valid: Optional[Selection] = None
        self.on_changed: Channel[Selection] = Channel("selection changed")

    @property
    def selection(self) -> Selection:
        return self._selection

    @selection.setter
    def selection(self, value: Selection) -> None:
        self.set(value)

    @property
    def latest_valid(self) -> Optional[Selection]:
        return self._latest_valid

    def set(self, value: Selection) -> Selection:
        if not isinstance(value, Selection):
            raise TypeError(f"Expected a Selection, got {value!r}")
        with self._lock:
            self._selection = value
            if can_upload_to(value):
                self._latest_valid = value
            logger.info("Selection set: %s", value)
            self.on_changed.fire(value)
        return value

    def select(self, device: Optional[Device] = None, endpoint: Optional[Endpoint] = None) -> Selection:
        return self.set(Selection(selected_device=device, selected_endpoint=endpoint))

    def clear(self) -> Selection:
        return self.set(Selection())

    # =========================================================================
    # Persistence
    # =========================================================================

    async def load(self, storage: KeyValueStorage) -> Selection:
        """Restore the persisted selection without notifying.

        Read failures are logged and produce an empty Selection.
        """
        try:
            latest = decode_selection(await storage.get(LATEST_SELECTION_KEY))
            latest_valid = decode_selection(await storage.get(LATEST_VALID_SELECTION_KEY))
        except (OSError, ValueError) as e:
            logger.warning("Failed to load persisted selection: %s", e)
            latest, latest_valid = Selection(), Selection()

        with self._lock:
            self._selection = latest
            self._latest_valid = latest_valid if can_upload_to(latest_valid) else None
        logger.info("Loaded selection: %s", latest)
        return latest

    async def save(self, storage: KeyValueStorage, selection: Optional[Selection] = None) -> bool:
        """Persist ``selection`` (default: current) and the latest valid one."""
        selection = selection if selection is not None else self._selection
        latest_valid = self._latest_valid
        try:
            device, endpoint = selection.selected_device, selection.selected_endpoint
            if device is not None and endpoint is not None:
                await storage.set(endpoint_hint_key(endpoint), device.without_endpoint().to_dict())
            await storage.set(LATEST_SELECTION_KEY, selection.to_dict())
            if latest_valid is not None:
                await storage.set(LATEST_VALID_SELECTION_KEY, latest_valid.to_dict())
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to persist selection %s: %s", selection, e, exc_info=True)
            return False
        logger.debug("Persisted selection: %s", selection)
        return True


async def load_endpoint_hint(storage: KeyValueStorage, endpoint: Endpoint) -> Optional[Device]:
    """Return the device last selected on ``endpoint``, if one was stored."""
    try:
        data = await storage.get(endpoint_hint_key(endpoint))
        return Device.from_dict(data) if data is not None else None
    except (OSError, ValueError, SelectionFormatError) as e:
        logger.warning("Ignoring unreadable hint for %s: %s", endpoint, e)
        return None


__all__ = [
    "ENDPOINT_HINT_KEY_PREFIX",
    "LATEST_SELECTION_KEY",
    "LATEST_VALID_SELECTION_KEY",
    "SelectionStore",
    "decode_selection",
    "endpoint_hint_key",
    "load_endpoint_hint",
]
