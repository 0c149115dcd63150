"""
Core value types for device inventory and reconciliation.

Everything here is immutable: snapshots, selections and available
entries are replaced wholesale on every change, never mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Optional

from .errors import SelectionFormatError


class ItemKind(Enum):
    """Tag for the two kinds of item a discovery backend attaches or detaches."""
    DEVICE = "device"
    ENDPOINT = "endpoint"


class Classification(Enum):
    """How well an available device is backed by live hardware."""
    RECOGNIZED = "recognized"    # Catalog-known device on a live endpoint
    GUESSED = "guessed"          # User-declared name on a live endpoint
    INCOMPLETE = "incomplete"    # Unknown hardware, or a selection with no live endpoint

    @property
    def rank(self) -> int:
        return _CLASSIFICATION_RANK[self]


_CLASSIFICATION_RANK = {
    Classification.RECOGNIZED: 2,
    Classification.GUESSED: 1,
    Classification.INCOMPLETE: 0,
}


@dataclass(frozen=True)
class Endpoint:
    """A connection endpoint, e.g. ``Endpoint("serial", "/dev/ttyACM0")``."""
    protocol: str
    address: str

    kind: ClassVar[ItemKind] = ItemKind.ENDPOINT

    def same_as(self, other: Optional["Endpoint"]) -> bool:
        return other is not None and self.protocol == other.protocol and self.address == other.address

    def __str__(self) -> str:
        return f"{self.protocol}://{self.address}"

    def to_dict(self) -> dict[str, str]:
        return {"protocol": self.protocol, "address": self.address}

    @classmethod
    def from_dict(cls, data: Any) -> "Endpoint":
        if not isinstance(data, dict):
            raise SelectionFormatError(f"Endpoint must be an object, got {data!r}")
        protocol, address = data.get("protocol"), data.get("address")
        if not isinstance(protocol, str) or not isinstance(address, str):
            raise SelectionFormatError(f"Endpoint needs string protocol and address: {data!r}")
        return cls(protocol=protocol, address=address)


@dataclass(frozen=True)
class Device:
    """A named hardware unit, optionally catalog-identified and bound to an endpoint."""
    name: str
    type_id: Optional[str] = None
    endpoint: Optional[Endpoint] = None

    kind: ClassVar[ItemKind] = ItemKind.DEVICE

    @property
    def is_catalog_known(self) -> bool:
        return bool(self.type_id)

    def has_endpoint(self, endpoint: Optional[Endpoint]) -> bool:
        return self.endpoint is not None and self.endpoint.same_as(endpoint)

    def without_endpoint(self) -> "Device":
        return Device(name=self.name, type_id=self.type_id)

    def with_endpoint(self, endpoint: Optional[Endpoint]) -> "Device":
        return Device(name=self.name, type_id=self.type_id, endpoint=endpoint)

    def same_identity(self, other: Optional["Device"]) -> bool:
        """Same name and type id, regardless of endpoint."""
        return other is not None and self.name == other.name and self.type_id == other.type_id

    def __str__(self) -> str:
        label = f"{self.name} [{self.type_id}]" if self.type_id else (self.name or "<unnamed>")
        return f"{label} @ {self.endpoint}" if self.endpoint else label

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name}
        if self.type_id is not None:
            data["type_id"] = self.type_id
        if self.endpoint is not None:
            data["endpoint"] = self.endpoint.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "Device":
        if not isinstance(data, dict):
            raise SelectionFormatError(f"Device must be an object, got {data!r}")
        name = data.get("name")
        type_id = data.get("type_id")
        if not isinstance(name, str):
            raise SelectionFormatError(f"Device needs a string name: {data!r}")
        if type_id is not None and not isinstance(type_id, str):
            raise SelectionFormatError(f"Device type_id must be a string: {data!r}")
        endpoint = data.get("endpoint")
        return cls(
            name=name,
            type_id=type_id,
            endpoint=Endpoint.from_dict(endpoint) if endpoint is not None else None,
        )


# Tagged union of what a discovery backend can attach or detach
InventoryItem = Device | Endpoint


@dataclass(frozen=True)
class InventorySnapshot:
    """
    Live devices and endpoints at one point in time.

    Every endpoint referenced by a device also appears in ``endpoints``.
    """
    devices: tuple[Device, ...] = ()
    endpoints: tuple[Endpoint, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.devices and not self.endpoints

    def has_endpoint(self, endpoint: Optional[Endpoint]) -> bool:
        return any(candidate.same_as(endpoint) for candidate in self.endpoints)


@dataclass(frozen=True)
class InventoryDiff:
    """What was attached and detached between two snapshots."""
    attached_devices: tuple[Device, ...] = ()
    attached_endpoints: tuple[Endpoint, ...] = ()
    detached_devices: tuple[Device, ...] = ()
    detached_endpoints: tuple[Endpoint, ...] = ()


@dataclass(frozen=True)
class InventoryChange:
    """Old/new snapshot pair published after every inventory mutation."""
    old_state: InventorySnapshot
    new_state: InventorySnapshot

    def diff(self) -> InventoryDiff:
        old, new = self.old_state, self.new_state
        return InventoryDiff(
            attached_devices=tuple(d for d in new.devices if d not in old.devices),
            attached_endpoints=tuple(e for e in new.endpoints if e not in old.endpoints),
            detached_devices=tuple(d for d in old.devices if d not in new.devices),
            detached_endpoints=tuple(e for e in old.endpoints if e not in new.endpoints),
        )


@dataclass(frozen=True)
class Selection:
    """The user's declared device/endpoint choice, live or not."""
    selected_device: Optional[Device] = None
    selected_endpoint: Optional[Endpoint] = None

    @property
    def is_empty(self) -> bool:
        return self.selected_device is None and self.selected_endpoint is None

    def __str__(self) -> str:
        device = self.selected_device.name if self.selected_device else "<none>"
        return f"{device} on {self.selected_endpoint or '<no endpoint>'}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "selected_device": self.selected_device.to_dict() if self.selected_device else None,
            "selected_endpoint": self.selected_endpoint.to_dict() if self.selected_endpoint else None,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Selection":
        """Decode ``to_dict`` output; raises SelectionFormatError when malformed."""
        if not isinstance(data, dict):
            raise SelectionFormatError(f"Selection must be an object, got {data!r}")
        device = data.get("selected_device")
        endpoint = data.get("selected_endpoint")
        return cls(
            selected_device=Device.from_dict(device) if device is not None else None,
            selected_endpoint=Endpoint.from_dict(endpoint) if endpoint is not None else None,
        )


@dataclass(frozen=True)
class AvailableDevice:
    """A classified device entry derived from inventory and selection."""
    name: str
    type_id: Optional[str] = None
    endpoint: Optional[Endpoint] = None
    state: Classification = Classification.INCOMPLETE
    selected: bool = False

    @property
    def is_live(self) -> bool:
        return self.endpoint is not None

    def as_device(self) -> Device:
        return Device(name=self.name, type_id=self.type_id, endpoint=self.endpoint)


__all__ = [
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
]
