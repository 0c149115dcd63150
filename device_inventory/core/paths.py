"""Default filesystem locations for device_inventory."""

from __future__ import annotations

import os
from pathlib import Path

# Per-user state, overridable for read-only homes and tests
_USER_STATE_ENV = os.environ.get("DEVICE_INVENTORY_STATE_DIR")
USER_STATE_DIR = Path(_USER_STATE_ENV).expanduser() if _USER_STATE_ENV else (Path.home() / ".device_inventory")

CONFIG_PATH = USER_STATE_DIR / "config.txt"
STATE_FILE = USER_STATE_DIR / "selection.json"
LOGS_DIR = USER_STATE_DIR / "logs"
LOG_FILE = LOGS_DIR / "device_inventory.log"


__all__ = [
    "USER_STATE_DIR",
    "CONFIG_PATH",
    "STATE_FILE",
    "LOGS_DIR",
    "LOG_FILE",
]
