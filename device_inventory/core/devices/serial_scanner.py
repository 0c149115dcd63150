"""
Serial port scanner - discovery backend built on pyserial.

Polls ``serial.tools.list_ports.comports()`` and turns port changes into
one attach/detach diff per scan. Ports whose USB VID/PID is in the
catalog are attached as named Devices, anything else as a bare Endpoint.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional

import serial.tools.list_ports

from device_inventory.core.logging_utils import get_module_logger
from .catalog import DEFAULT_CATALOG, SERIAL_PROTOCOL, CatalogEntry, identify_usb_device
from .errors import InventoryError
from .inventory import InventoryStore
from .notifier import Subscription
from .types import Device, Endpoint, InventoryItem

logger = get_module_logger("SerialPortScanner")


def item_for_port(port_info, catalog: Iterable[CatalogEntry] = DEFAULT_CATALOG) -> InventoryItem:
    """Build the inventory item for one ``ListPortInfo``."""
    endpoint = Endpoint(SERIAL_PROTOCOL, port_info.device)
    entry = identify_usb_device(port_info.vid, port_info.pid, catalog)
    if entry is None:
        return endpoint
    return Device(name=entry.name, type_id=entry.type_id, endpoint=endpoint)


class SerialPortScanner:
    """
    Continuously scans serial ports and pushes changes into an InventoryStore.

    Usage:
        scanner = SerialPortScanner(scan_interval=1.0)
        handle = scanner.register(inventory_store)
        await scanner.start()
        # ... later ...
        await scanner.stop()
        handle.dispose()
    """

    DEFAULT_SCAN_INTERVAL = 1.0

    def __init__(
        self,
        scan_interval: float = DEFAULT_SCAN_INTERVAL,
        catalog: Iterable[CatalogEntry] = DEFAULT_CATALOG,
    ):
        self._scan_interval = scan_interval
        self._catalog = tuple(catalog)
        self._store: Optional[InventoryStore] = None

        # port path -> item attached for it
        self._known: dict[str, InventoryItem] = {}
        self._scan_task: Optional[asyncio.Task] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def known_items(self) -> dict[str, InventoryItem]:
        return dict(self._known)

    def register(self, store: InventoryStore) -> Subscription:
        self._store = store

        def _deregister() -> None:
            if self._store is store:
                self._store = None

        return Subscription(_deregister)

    async def start(self) -> None:
        """Scan once immediately, then keep polling."""
        if self._running:
            return
        self._running = True
        await self.force_scan()
        self._scan_task = asyncio.create_task(self._scan_loop())
        logger.info("Serial scanner started (interval %.2fs)", self._scan_interval)

    async def stop(self) -> None:
        """Stop polling and detach everything this scanner attached."""
        self._running = False
        if self._scan_task:
            self._scan_task.cancel()
            try:
                await self._scan_task
            except asyncio.CancelledError:
                pass
            self._scan_task = None

        if self._known and self._store is not None:
            if self._push(to_attach=(), to_detach=tuple(self._known.values())):
                self._known.clear()
            else:
                logger.warning("Keeping %d known port(s) after failed detach", len(self._known))
        else:
            self._known.clear()
        logger.info("Serial scanner stopped")

    async def force_scan(self) -> None:
        """Run one scan now (useful for manual refresh)."""
        ports = await asyncio.to_thread(serial.tools.list_ports.comports)
        self.apply_ports(ports)

    def apply_ports(self, ports) -> None:
        """Diff ``ports`` against the previous scan and push the result."""
        current: dict[str, InventoryItem] = {}
        for port_info in ports:
            current[port_info.device] = item_for_port(port_info, self._catalog)

        to_attach = []
        to_detach = []
        for path, item in current.items():
            previous = self._known.get(path)
            if previous == item:
                continue
            if previous is not None:
                to_detach.append(previous)
            to_attach.append(item)
        for path, item in self._known.items():
            if path not in current:
                to_detach.append(item)

        if not to_attach and not to_detach:
            return

        if self._push(to_attach, to_detach):
            self._known = current

    def _push(self, to_attach, to_detach) -> bool:
        if self._store is None:
            logger.debug("No inventory store registered, dropping scan result")
            return False
        try:
            self._store.apply_diff(to_attach=to_attach, to_detach=to_detach)
            return True
        except InventoryError as e:
            logger.error("Inventory rejected scan result: %s", e)
            return False

    async def _scan_loop(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self._scan_interval)
                await self.force_scan()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Error in serial scan loop: %s", e, exc_info=True)


__all__ = ["SerialPortScanner", "item_for_port"]
