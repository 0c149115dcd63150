"""
Tests for the device inventory value types.

Tests cover:
- Endpoint / Device equality and predicates
- Selection serialization and corrupt input handling
- InventoryChange diffs
"""

import pytest

from device_inventory.core.devices import (
    AvailableDevice,
    Classification,
    Device,
    Endpoint,
    InventoryChange,
    InventorySnapshot,
    ItemKind,
    Selection,
    SelectionFormatError,
)


class TestEndpoint:
    """Tests for Endpoint."""

    def test_value_equality(self):
        assert Endpoint("serial", "/dev/ttyACM0") == Endpoint("serial", "/dev/ttyACM0")
        assert Endpoint("serial", "/dev/ttyACM0") != Endpoint("network", "/dev/ttyACM0")

    def test_same_as(self):
        endpoint = Endpoint("serial", "/dev/ttyACM0")
        assert endpoint.same_as(Endpoint("serial", "/dev/ttyACM0"))
        assert not endpoint.same_as(Endpoint("serial", "/dev/ttyACM1"))
        assert not endpoint.same_as(None)

    def test_str(self):
        assert str(Endpoint("serial", "COM3")) == "serial://COM3"

    def test_kind_tag(self):
        assert Endpoint("serial", "COM3").kind is ItemKind.ENDPOINT

    def test_hashable(self):
        assert len({Endpoint("serial", "a"), Endpoint("serial", "a")}) == 1


class TestDevice:
    """Tests for Device."""

    def test_defaults(self):
        device = Device(name="Nano")
        assert device.type_id is None
        assert device.endpoint is None
        assert not device.is_catalog_known
        assert device.kind is ItemKind.DEVICE

    def test_has_endpoint(self, uno, acm0, usb0):
        assert uno.has_endpoint(acm0)
        assert not uno.has_endpoint(usb0)
        assert not Device(name="Nano").has_endpoint(acm0)

    def test_endpoint_rebinding(self, uno, usb0):
        assert uno.without_endpoint() == Device(name="Uno", type_id="avr:uno")
        moved = uno.with_endpoint(usb0)
        assert moved.endpoint == usb0
        assert moved.same_identity(uno)
        assert moved != uno

    def test_same_identity_requires_type_id_match(self, uno):
        assert not uno.same_identity(Device(name="Uno"))
        assert not uno.same_identity(None)

    def test_empty_type_id_is_not_catalog_known(self):
        assert not Device(name="x", type_id="").is_catalog_known

    def test_dict_round_trip(self, uno):
        assert uno.to_dict() == {
            "name": "Uno",
            "type_id": "avr:uno",
            "endpoint": {"protocol": "serial", "address": "/dev/ttyACM0"},
        }
        assert Device.from_dict(uno.to_dict()) == uno

    def test_to_dict_omits_missing_fields(self):
        assert Device(name="guessed").to_dict() == {"name": "guessed"}

    @pytest.mark.parametrize("data", [
        None,
        "Uno",
        {},
        {"name": 5},
        {"name": "Uno", "type_id": 3},
        {"name": "Uno", "endpoint": {"protocol": "serial"}},
    ])
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(SelectionFormatError):
            Device.from_dict(data)


class TestSelection:
    """Tests for Selection."""

    def test_empty(self):
        assert Selection().is_empty
        assert not Selection(selected_device=Device(name="x")).is_empty

    def test_round_trip(self, uno, acm0):
        selection = Selection(selected_device=uno, selected_endpoint=acm0)
        assert Selection.from_dict(selection.to_dict()) == selection

    def test_empty_round_trip(self):
        assert Selection().to_dict() == {"selected_device": None, "selected_endpoint": None}
        assert Selection.from_dict({}) == Selection()

    def test_from_dict_rejects_non_object(self):
        with pytest.raises(SelectionFormatError):
            Selection.from_dict(["not", "a", "selection"])

    def test_from_dict_rejects_bad_endpoint(self):
        with pytest.raises(SelectionFormatError):
            Selection.from_dict({"selected_endpoint": "serial:///dev/ttyACM0"})


class TestInventoryChange:
    """Tests for InventoryChange.diff()."""

    def test_diff(self, uno, acm0, usb0):
        old = InventorySnapshot(devices=(uno,), endpoints=(acm0,))
        new = InventorySnapshot(devices=(), endpoints=(usb0,))
        diff = InventoryChange(old_state=old, new_state=new).diff()
        assert diff.attached_devices == ()
        assert diff.attached_endpoints == (usb0,)
        assert diff.detached_devices == (uno,)
        assert diff.detached_endpoints == (acm0,)

    def test_snapshot_helpers(self, acm0, usb0):
        snapshot = InventorySnapshot(endpoints=(acm0,))
        assert not snapshot.is_empty
        assert snapshot.has_endpoint(acm0)
        assert not snapshot.has_endpoint(usb0)
        assert InventorySnapshot().is_empty


class TestClassification:
    """Tests for Classification ranking and AvailableDevice helpers."""

    def test_rank_order(self):
        assert Classification.RECOGNIZED.rank > Classification.GUESSED.rank > Classification.INCOMPLETE.rank

    def test_available_device_helpers(self, acm0):
        entry = AvailableDevice(name="Uno", type_id="avr:uno", endpoint=acm0, state=Classification.RECOGNIZED)
        assert entry.is_live
        assert entry.as_device() == Device(name="Uno", type_id="avr:uno", endpoint=acm0)
        assert not AvailableDevice(name="ghost").is_live
