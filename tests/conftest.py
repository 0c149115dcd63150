"""Shared pytest configuration and fixtures for the device_inventory test suite."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from device_inventory.core.devices import Device, Endpoint


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring physical serial hardware"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require physical hardware",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def acm0() -> Endpoint:
    return Endpoint("serial", "/dev/ttyACM0")


@pytest.fixture
def usb0() -> Endpoint:
    return Endpoint("serial", "/dev/ttyUSB0")


@pytest.fixture
def uno(acm0) -> Device:
    """A catalog-known board on /dev/ttyACM0."""
    return Device(name="Uno", type_id="avr:uno", endpoint=acm0)


@pytest.fixture
def port_info_factory():
    """Factory for mock ``serial.tools.list_ports`` ListPortInfo objects."""
    def factory(device: str, vid=None, pid=None) -> MagicMock:
        port = MagicMock()
        port.device = device
        port.vid = vid
        port.pid = pid
        return port

    return factory
