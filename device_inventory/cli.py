"""Command line watcher: scan serial ports and log the available devices."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
from pathlib import Path
from typing import Optional, Sequence

from device_inventory.core.config_manager import DeviceInventoryConfig, load_config_async
from device_inventory.core.devices import DeviceInventory, SerialPortScanner
from device_inventory.core.devices.types import AvailableDevice
from device_inventory.core.logging_config import LOG_LEVELS, configure_logging
from device_inventory.core.logging_utils import get_module_logger
from device_inventory.core.paths import CONFIG_PATH, LOG_FILE

logger = get_module_logger("CLI")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="device_inventory",
        description="Watch attached serial devices and reconcile them with the saved selection.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_PATH,
        help="Configuration file (key = value)",
    )
    parser.add_argument(
        "--state-file",
        type=Path,
        default=None,
        help="Where the selection is persisted (overrides the config file)",
    )
    parser.add_argument(
        "--scan-interval",
        type=float,
        default=None,
        help="Seconds between serial port scans",
    )
    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default=None,
        help="Logging verbosity",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Log file path (default: ~/.device_inventory/logs/device_inventory.log, none with --once)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Scan once, print the available devices and exit",
    )
    return parser


def apply_cli_overrides(config: DeviceInventoryConfig, args: argparse.Namespace) -> DeviceInventoryConfig:
    if args.state_file is not None:
        config.state_file = args.state_file
    if args.scan_interval is not None and args.scan_interval > 0:
        config.scan_interval = args.scan_interval
    if args.log_level is not None:
        config.log_level = args.log_level
    return config


def format_available(available: Sequence[AvailableDevice]) -> str:
    if not available:
        return "(no devices)"
    lines = []
    for entry in available:
        marker = "*" if entry.selected else " "
        name = entry.name or "Unknown"
        type_id = f" [{entry.type_id}]" if entry.type_id else ""
        endpoint = str(entry.endpoint) if entry.endpoint else "-"
        lines.append(f"{marker} {name}{type_id} @ {endpoint} ({entry.state.value})")
    return "\n".join(lines)


async def run(args: argparse.Namespace) -> int:
    config = apply_cli_overrides(await load_config_async(args.config), args)
    log_file = args.log_file
    if log_file is None and not args.once:
        log_file = LOG_FILE
    if config.log_level not in LOG_LEVELS:
        logger.warning("Unknown log_level %r in config, using info", config.log_level)
        config.log_level = "info"
    configure_logging(config.log_level, log_file=log_file)

    inventory = DeviceInventory.from_config(config)
    await inventory.load_state()

    scanner = SerialPortScanner(scan_interval=config.scan_interval)
    inventory.connect(scanner)

    if args.once:
        await scanner.force_scan()
        print(format_available(inventory.available_devices()))
        inventory.dispose()
        return 0

    inventory.on_available_changed.subscribe(
        lambda available: logger.info("Available devices:\n%s", format_available(available))
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)

    await scanner.start()
    try:
        await stop_event.wait()
    finally:
        await scanner.stop()
        await inventory.save_state()
        await inventory.flush()
        inventory.dispose()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


__all__ = ["build_parser", "format_available", "main", "run"]
