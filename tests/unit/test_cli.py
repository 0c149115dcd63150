"""Unit tests for the command line watcher."""

import json
from unittest.mock import patch

import pytest

from device_inventory import cli
from device_inventory.core.config_manager import DeviceInventoryConfig
from device_inventory.core.devices import AvailableDevice, Classification, Endpoint


class TestParser:
    """Tests for argument parsing and overrides."""

    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        assert args.state_file is None
        assert args.scan_interval is None
        assert args.log_level is None
        assert not args.once

    def test_rejects_unknown_level(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--log-level", "chatty"])

    def test_overrides(self, temp_work_dir):
        args = cli.build_parser().parse_args([
            "--state-file", str(temp_work_dir / "s.json"),
            "--scan-interval", "0.5",
            "--log-level", "debug",
        ])
        config = cli.apply_cli_overrides(DeviceInventoryConfig(), args)
        assert config.state_file == temp_work_dir / "s.json"
        assert config.scan_interval == 0.5
        assert config.log_level == "debug"

    def test_non_positive_interval_ignored(self):
        args = cli.build_parser().parse_args(["--scan-interval", "0"])
        assert cli.apply_cli_overrides(DeviceInventoryConfig(), args).scan_interval == 1.0


class TestFormatAvailable:
    """Tests for format_available()."""

    def test_empty(self):
        assert cli.format_available(()) == "(no devices)"

    def test_entries(self):
        available = (
            AvailableDevice(
                name="Arduino Uno",
                type_id="arduino:avr:uno",
                endpoint=Endpoint("serial", "/dev/ttyACM0"),
                state=Classification.RECOGNIZED,
            ),
            AvailableDevice(name="Nano", state=Classification.INCOMPLETE, selected=True),
            AvailableDevice(name="", endpoint=Endpoint("serial", "/dev/ttyUSB0")),
        )
        assert cli.format_available(available).splitlines() == [
            "  Arduino Uno [arduino:avr:uno] @ serial:///dev/ttyACM0 (recognized)",
            "* Nano @ - (incomplete)",
            "  Unknown @ serial:///dev/ttyUSB0 (incomplete)",
        ]


class TestOnce:
    """Tests for a single scan run."""

    def test_once_prints_available(self, temp_work_dir, port_info_factory, capsys):
        state_file = temp_work_dir / "selection.json"
        state_file.write_text(json.dumps({
            "latest-selection": {"selected_device": {"name": "Nano"}, "selected_endpoint": None},
        }))
        ports = [port_info_factory("/dev/ttyACM0", 0x2341, 0x0043)]

        with patch("serial.tools.list_ports.comports", return_value=ports), \
                patch.object(cli, "configure_logging") as configure:
            code = cli.main([
                "--config", str(temp_work_dir / "missing.txt"),
                "--state-file", str(state_file),
                "--once",
            ])

        assert code == 0
        configure.assert_called_once()
        assert configure.call_args.kwargs["log_file"] is None
        assert capsys.readouterr().out.splitlines() == [
            "  Arduino Uno [arduino:avr:uno] @ serial:///dev/ttyACM0 (recognized)",
            "* Nano @ - (incomplete)",
        ]
