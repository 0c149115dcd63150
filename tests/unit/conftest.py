"""Unit test fixtures for isolated, fast test execution.

Unit tests:
- Run in complete isolation (no serial hardware, no real state directory)
- Use mocks for port enumeration and storage failures
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from device_inventory.core.devices import DeviceInventory, InMemoryDiscoveryBackend
from device_inventory.core.state_persistence import InMemoryStorage

# =============================================================================
# Isolated Environment Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def temp_work_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Provide a temporary working directory for state and config files.

    Scope: function (fresh directory per test)
    """
    work_dir = tmp_path / "test_work"
    work_dir.mkdir()
    yield work_dir


# =============================================================================
# Device System Fixtures
# =============================================================================

@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def backend() -> InMemoryDiscoveryBackend:
    return InMemoryDiscoveryBackend()


@pytest.fixture
def system(backend) -> Generator[DeviceInventory, None, None]:
    """A storage-less DeviceInventory connected to an in-memory backend."""
    inventory = DeviceInventory()
    inventory.connect(backend)
    yield inventory
    inventory.dispose()
