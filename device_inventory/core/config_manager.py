"""
Configuration loading for device_inventory.

Configuration files use the plain ``key = value`` format::

    # device_inventory config
    state_file = ~/.device_inventory/selection.json
    scan_interval = 1.0
    auto_reconnect = false
    guess_from_history = false
    log_level = info

Unknown keys are ignored, malformed values fall back to defaults with a
warning.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import aiofiles

from .logging_utils import get_module_logger
from .paths import STATE_FILE

logger = get_module_logger("ConfigManager")


class ConfigManager:

    def __init__(self):
        self.logger = logger

    @staticmethod
    def _stringify_value(value: Any) -> str:
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)

    def _parse_config_lines(self, lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for raw_line in lines:
            line = raw_line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                continue

            key, value = line.split('=', 1)
            key = key.strip()
            value = value.strip()

            if '#' in value:
                value = value.split('#')[0].strip()

            if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                value = value[1:-1]

            config[key] = value

        return config

    def read_config(self, config_path: Path) -> Dict[str, str]:
        """Read a config file synchronously. A missing file yields ``{}``."""
        if not config_path.exists():
            return {}
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return self._parse_config_lines(f)
        except OSError as e:
            logger.error("Failed to read config %s: %s", config_path, e)
            return {}

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        """Async version for use in async contexts."""
        if not await asyncio.to_thread(config_path.exists):
            return {}
        try:
            lines: list[str] = []
            async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                async for line in f:
                    lines.append(line)
            return self._parse_config_lines(lines)
        except OSError as e:
            logger.error("Failed to read config %s: %s", config_path, e)
            return {}

    async def write_config_async(self, config_path: Path, values: Dict[str, Any]) -> bool:
        """Write ``values`` as a fresh config file, keys sorted."""
        try:
            await asyncio.to_thread(config_path.parent.mkdir, parents=True, exist_ok=True)
            async with aiofiles.open(config_path, 'w', encoding='utf-8') as f:
                for key in sorted(values):
                    await f.write(f"{key} = {self._stringify_value(values[key])}\n")
            return True
        except OSError as e:
            logger.error("Failed to write config %s: %s", config_path, e, exc_info=True)
            return False

    def get_bool(self, config: Dict[str, str], key: str, default: bool = False) -> bool:
        if key not in config:
            return default

        value = config[key].lower()
        return value in ('true', '1', 'yes', 'on')

    def get_int(self, config: Dict[str, str], key: str, default: int = 0) -> int:
        if key not in config:
            return default

        try:
            return int(config[key])
        except ValueError:
            logger.warning("Invalid int value for %s: %s, using default %d", key, config[key], default)
            return default

    def get_float(self, config: Dict[str, str], key: str, default: float = 0.0) -> float:
        if key not in config:
            return default

        try:
            return float(config[key])
        except ValueError:
            logger.warning("Invalid float value for %s: %s, using default %f", key, config[key], default)
            return default

    def get_str(self, config: Dict[str, str], key: str, default: str = "") -> str:
        return config.get(key, default)


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager


@dataclass
class DeviceInventoryConfig:
    """Runtime settings for a DeviceInventory and its scanner."""
    state_file: Optional[Path] = field(default_factory=lambda: STATE_FILE)
    scan_interval: float = 1.0
    auto_reconnect: bool = False
    guess_from_history: bool = False
    log_level: str = "info"

    @classmethod
    def from_mapping(cls, config: Dict[str, str]) -> "DeviceInventoryConfig":
        manager = get_config_manager()
        defaults = cls()

        state_file = manager.get_str(config, "state_file", "")
        if state_file.lower() in ("none", "off"):
            resolved_state: Optional[Path] = None
        elif state_file:
            resolved_state = Path(state_file).expanduser()
        else:
            resolved_state = defaults.state_file

        scan_interval = manager.get_float(config, "scan_interval", defaults.scan_interval)
        if scan_interval <= 0:
            logger.warning("scan_interval must be positive, using %s", defaults.scan_interval)
            scan_interval = defaults.scan_interval

        return cls(
            state_file=resolved_state,
            scan_interval=scan_interval,
            auto_reconnect=manager.get_bool(config, "auto_reconnect", defaults.auto_reconnect),
            guess_from_history=manager.get_bool(config, "guess_from_history", defaults.guess_from_history),
            log_level=manager.get_str(config, "log_level", defaults.log_level).lower(),
        )


def load_config(config_path: Optional[Path]) -> DeviceInventoryConfig:
    if config_path is None:
        return DeviceInventoryConfig()
    return DeviceInventoryConfig.from_mapping(get_config_manager().read_config(config_path))


async def load_config_async(config_path: Optional[Path]) -> DeviceInventoryConfig:
    if config_path is None:
        return DeviceInventoryConfig()
    values = await get_config_manager().read_config_async(config_path)
    return DeviceInventoryConfig.from_mapping(values)
