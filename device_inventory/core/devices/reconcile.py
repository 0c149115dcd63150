"""
Reconciliation Engine - derives the available-devices view.

``compute_available`` merges a live InventorySnapshot with the user's
Selection and classifies every candidate:

1. Each attached device becomes an entry: RECOGNIZED when it has a type
   id and a live endpoint, INCOMPLETE otherwise.
2. Each endpoint no device claims becomes an unnamed INCOMPLETE
   placeholder (or GUESSED, from a remembered device on that endpoint).
3. An entry on the selected endpoint is marked selected. A placeholder
   picked this way takes the selected device's name and type id and
   becomes GUESSED.
4. If nothing matched, the selected device is appended as a selected,
   endpoint-less INCOMPLETE entry so the selection survives a detach.

Entries sharing an endpoint are merged, keeping the richer one. Output
order is attach order, then placeholders, then the preserved selection.

Everything here is pure: same inputs, same tuple, no errors.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .types import (
    AvailableDevice,
    Classification,
    Device,
    Endpoint,
    InventorySnapshot,
    Selection,
)

# Remembered device per endpoint, keyed by str(endpoint)
EndpointHints = Mapping[str, Device]

_VERIFIABLE_STATES = frozenset({Classification.RECOGNIZED, Classification.GUESSED})


@dataclass
class _Candidate:
    entry: AvailableDevice
    placeholder: bool = False


def _richness(entry: AvailableDevice) -> tuple[int, bool, bool]:
    return (entry.state.rank, entry.type_id is not None, bool(entry.name))


def _seed_device(device: Device) -> AvailableDevice:
    recognized = device.is_catalog_known and device.endpoint is not None
    return AvailableDevice(
        name=device.name,
        type_id=device.type_id,
        endpoint=device.endpoint,
        state=Classification.RECOGNIZED if recognized else Classification.INCOMPLETE,
    )


def _seed_endpoint(endpoint: Endpoint, hints: EndpointHints) -> _Candidate:
    remembered = hints.get(str(endpoint))
    if remembered is not None:
        entry = AvailableDevice(
            name=remembered.name,
            type_id=remembered.type_id,
            endpoint=endpoint,
            state=Classification.GUESSED,
        )
    else:
        entry = AvailableDevice(name="", endpoint=endpoint)
    return _Candidate(entry, placeholder=True)


def _find_by_endpoint(candidates: list[_Candidate], endpoint: Optional[Endpoint]) -> int:
    if endpoint is None:
        return -1
    for index, candidate in enumerate(candidates):
        if endpoint.same_as(candidate.entry.endpoint):
            return index
    return -1


def _merge_into(candidates: list[_Candidate], incoming: _Candidate) -> None:
    """Append ``incoming`` or merge it with the entry already on its endpoint."""
    index = _find_by_endpoint(candidates, incoming.entry.endpoint)
    if index == -1:
        candidates.append(incoming)
        return
    existing = candidates[index]
    if _richness(incoming.entry) > _richness(existing.entry):
        candidates[index] = incoming


def compute_available(
    inventory: InventorySnapshot,
    selection: Selection,
    hints: Optional[EndpointHints] = None,
) -> tuple[AvailableDevice, ...]:
    """Classify every device and endpoint in ``inventory`` against ``selection``."""
    hints = hints or {}
    candidates: list[_Candidate] = []

    for device in inventory.devices:
        _merge_into(candidates, _Candidate(_seed_device(device)))

    for endpoint in inventory.endpoints:
        if _find_by_endpoint(candidates, endpoint) == -1:
            candidates.append(_seed_endpoint(endpoint, hints))

    selected_device = selection.selected_device
    matched = _find_by_endpoint(candidates, selection.selected_endpoint)
    if matched != -1:
        candidate = candidates[matched]
        entry = replace(candidate.entry, selected=True)
        if selected_device is not None and candidate.placeholder:
            entry = replace(
                entry,
                name=selected_device.name,
                type_id=selected_device.type_id,
                state=Classification.GUESSED,
            )
        candidates[matched] = _Candidate(entry, placeholder=candidate.placeholder)

    available = [candidate.entry for candidate in candidates]

    if matched == -1 and selected_device is not None:
        available.append(
            AvailableDevice(
                name=selected_device.name,
                type_id=selected_device.type_id,
                endpoint=None,
                state=Classification.INCOMPLETE,
                selected=True,
            )
        )

    return tuple(available)


def find_selected(available: tuple[AvailableDevice, ...]) -> Optional[AvailableDevice]:
    for entry in available:
        if entry.selected:
            return entry
    return None


def can_verify(
    selection: Selection,
    inventory: InventorySnapshot,
    hints: Optional[EndpointHints] = None,
) -> bool:
    """True when ``selection`` resolves to a RECOGNIZED or GUESSED live entry."""
    selected = find_selected(compute_available(inventory, selection, hints))
    return selected is not None and selected.state in _VERIFIABLE_STATES


def can_upload_to(selection: Selection) -> bool:
    """True when the selection names a catalog device and an endpoint."""
    device = selection.selected_device
    return (
        device is not None
        and device.is_catalog_known
        and selection.selected_endpoint is not None
    )


__all__ = [
    "EndpointHints",
    "can_upload_to",
    "can_verify",
    "compute_available",
    "find_selected",
]
