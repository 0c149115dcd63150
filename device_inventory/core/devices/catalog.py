"""
USB device catalog used to name serial devices found by the scanner.

Entries map a USB VID/PID pair to a display name and a catalog type id.
Ports whose VID/PID is not listed are reported as bare endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

SERIAL_PROTOCOL = "serial"


@dataclass(frozen=True)
class CatalogEntry:
    """Identification for one USB device model."""
    vid: int
    pid: int
    name: str
    type_id: str


DEFAULT_CATALOG: tuple[CatalogEntry, ...] = (
    # Arduino AVR
    CatalogEntry(vid=0x2341, pid=0x0043, name="Arduino Uno", type_id="arduino:avr:uno"),
    CatalogEntry(vid=0x2341, pid=0x0001, name="Arduino Uno", type_id="arduino:avr:uno"),
    CatalogEntry(vid=0x2A03, pid=0x0043, name="Arduino Uno", type_id="arduino:avr:uno"),
    CatalogEntry(vid=0x2341, pid=0x0010, name="Arduino Mega or Mega 2560", type_id="arduino:avr:mega"),
    CatalogEntry(vid=0x2341, pid=0x0042, name="Arduino Mega or Mega 2560", type_id="arduino:avr:mega"),
    CatalogEntry(vid=0x2341, pid=0x8036, name="Arduino Leonardo", type_id="arduino:avr:leonardo"),
    CatalogEntry(vid=0x2341, pid=0x8037, name="Arduino Micro", type_id="arduino:avr:micro"),

    # Arduino SAMD
    CatalogEntry(vid=0x2341, pid=0x804E, name="Arduino MKR1000", type_id="arduino:samd:mkr1000"),
    CatalogEntry(vid=0x2341, pid=0x8057, name="Arduino NANO 33 IoT", type_id="arduino:samd:nano_33_iot"),
    CatalogEntry(vid=0x2341, pid=0x804D, name="Arduino Zero", type_id="arduino:samd:arduino_zero_native"),

    # Arduino mbed
    CatalogEntry(vid=0x2341, pid=0x805A, name="Arduino Nano 33 BLE", type_id="arduino:mbed:nano33ble"),
)


def identify_usb_device(
    vid: Optional[int],
    pid: Optional[int],
    catalog: Iterable[CatalogEntry] = DEFAULT_CATALOG,
) -> Optional[CatalogEntry]:
    """
    Identify a USB device by VID/PID.

    Returns:
        The first matching CatalogEntry, or None if unknown.
    """
    if vid is None or pid is None:
        return None
    for entry in catalog:
        if entry.vid == vid and entry.pid == pid:
            return entry
    return None


__all__ = ["CatalogEntry", "DEFAULT_CATALOG", "SERIAL_PROTOCOL", "identify_usb_device"]
