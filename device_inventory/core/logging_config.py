"""Root logging setup for the device_inventory watcher."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Level names accepted by the config file and --log-level
LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

LOG_FILE_MAX_BYTES = 256 * 1024
LOG_FILE_BACKUPS = 2

# pyserial's list_ports helpers are chatty at DEBUG
THIRD_PARTY_LOGGERS = ("serial", "asyncio")

_installed: list[logging.Handler] = []


def resolve_level(level: Union[int, str]) -> int:
    """Map a level name from config (or a numeric level) to a logging level."""
    if isinstance(level, int):
        return level
    try:
        return LOG_LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown log level '{level}', expected one of {sorted(LOG_LEVELS)}") from None


def _file_handler(log_file: Union[str, Path]) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8")


def configure_logging(
    level: Union[int, str] = "info",
    *,
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
) -> list[logging.Handler]:
    """Install the watcher's handlers on the root logger.

    Handlers from an earlier call are replaced, so the CLI can reconfigure
    after reading the config file. Returns the installed handlers.
    """
    numeric_level = resolve_level(level)
    root = logging.getLogger()

    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        handlers.append(_file_handler(log_file))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        root.addHandler(handler)
    _installed.extend(handlers)

    root.setLevel(numeric_level)
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    return handlers


__all__ = ["LOG_DATEFMT", "LOG_FORMAT", "LOG_LEVELS", "configure_logging", "resolve_level"]
