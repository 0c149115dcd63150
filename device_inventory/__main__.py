"""Allow ``python -m device_inventory`` to launch the serial watcher."""

from __future__ import annotations

import sys

from device_inventory.cli import main

if __name__ == "__main__":
    sys.exit(main())
