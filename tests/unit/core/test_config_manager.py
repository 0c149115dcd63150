"""Unit tests for ConfigManager and DeviceInventoryConfig."""

import asyncio
from pathlib import Path

import pytest

from device_inventory.core.config_manager import (
    ConfigManager,
    DeviceInventoryConfig,
    get_config_manager,
    load_config,
    load_config_async,
)
from device_inventory.core.paths import STATE_FILE


def run_async(coro):
    """Run async coroutine synchronously for testing."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.fixture
def manager():
    return ConfigManager()


class TestParsing:
    """Tests for key = value parsing."""

    def test_parse_lines(self, manager):
        config = manager._parse_config_lines([
            "# comment\n",
            "\n",
            "scan_interval = 2.5\n",
            "log_level = debug  # inline comment\n",
            'state_file = "/tmp/state.json"\n',
            "not a setting\n",
        ])
        assert config == {
            "scan_interval": "2.5",
            "log_level": "debug",
            "state_file": "/tmp/state.json",
        }

    def test_read_missing_file(self, manager, temp_work_dir):
        assert manager.read_config(temp_work_dir / "missing.txt") == {}

    def test_read_and_write_async(self, manager, temp_work_dir):
        path = temp_work_dir / "nested" / "config.txt"
        assert run_async(manager.write_config_async(path, {"auto_reconnect": True, "scan_interval": 0.5}))
        assert path.read_text() == "auto_reconnect = true\nscan_interval = 0.5\n"
        assert run_async(manager.read_config_async(path)) == {"auto_reconnect": "true", "scan_interval": "0.5"}
        assert manager.read_config(path) == {"auto_reconnect": "true", "scan_interval": "0.5"}

    def test_read_async_missing_file(self, manager, temp_work_dir):
        assert run_async(manager.read_config_async(temp_work_dir / "missing.txt")) == {}


class TestTypedGetters:
    """Tests for get_bool/get_int/get_float/get_str."""

    @pytest.mark.parametrize("value,expected", [
        ("true", True), ("YES", True), ("1", True), ("on", True),
        ("false", False), ("0", False), ("maybe", False),
    ])
    def test_get_bool(self, manager, value, expected):
        assert manager.get_bool({"flag": value}, "flag") is expected

    def test_defaults_for_missing_keys(self, manager):
        assert manager.get_bool({}, "flag", True) is True
        assert manager.get_int({}, "n", 7) == 7
        assert manager.get_float({}, "x", 1.5) == 1.5
        assert manager.get_str({}, "s", "dflt") == "dflt"

    def test_invalid_numbers_fall_back(self, manager):
        assert manager.get_int({"n": "abc"}, "n", 3) == 3
        assert manager.get_float({"x": "abc"}, "x", 0.25) == 0.25

    def test_shared_instance(self):
        assert get_config_manager() is get_config_manager()


class TestDeviceInventoryConfig:
    """Tests for DeviceInventoryConfig.from_mapping() and loaders."""

    def test_defaults(self):
        config = DeviceInventoryConfig.from_mapping({})
        assert config == DeviceInventoryConfig()
        assert config.state_file == STATE_FILE
        assert config.auto_reconnect is False
        assert config.guess_from_history is False

    def test_values(self):
        config = DeviceInventoryConfig.from_mapping({
            "state_file": "/tmp/custom.json",
            "scan_interval": "0.25",
            "auto_reconnect": "true",
            "guess_from_history": "yes",
            "log_level": "DEBUG",
        })
        assert config.state_file == Path("/tmp/custom.json")
        assert config.scan_interval == 0.25
        assert config.auto_reconnect is True
        assert config.guess_from_history is True
        assert config.log_level == "debug"

    @pytest.mark.parametrize("value", ["none", "off", "None"])
    def test_persistence_can_be_disabled(self, value):
        assert DeviceInventoryConfig.from_mapping({"state_file": value}).state_file is None

    @pytest.mark.parametrize("value", ["0", "-1", "abc"])
    def test_bad_scan_interval(self, value):
        assert DeviceInventoryConfig.from_mapping({"scan_interval": value}).scan_interval == 1.0

    def test_load_config(self, temp_work_dir):
        path = temp_work_dir / "config.txt"
        path.write_text("auto_reconnect = on\nstate_file = none\n")
        config = load_config(path)
        assert config.auto_reconnect is True
        assert config.state_file is None
        assert run_async(load_config_async(path)) == config

    def test_load_config_without_path(self):
        assert load_config(None) == DeviceInventoryConfig()
        assert run_async(load_config_async(None)) == DeviceInventoryConfig()
