"""
Key/value storage for persisted selection state.

The device system only needs ``get(key)`` and ``set(key, value)`` with
JSON-compatible values. Two storages are provided:

- InMemoryStorage: process-local dict, used by tests and embedders that
  persist elsewhere.
- JsonFileStorage: one JSON document on disk, read with aiofiles and
  written atomically (temp file, fsync, rename) so a crash never leaves
  a half-written state file behind.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import aiofiles

from device_inventory.core.logging_utils import get_module_logger


@runtime_checkable
class KeyValueStorage(Protocol):
    """Storage collaborator used for selection persistence."""

    async def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when the key is absent."""
        ...

    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value under ``key``."""
        ...


class InMemoryStorage:
    """Dict-backed storage."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._store: Dict[str, Any] = dict(initial or {})

    async def get(self, key: str) -> Optional[Any]:
        return self._store.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._store[key] = value

    def reset(self) -> None:
        self._store.clear()

    def keys(self) -> list[str]:
        return sorted(self._store)


class JsonFileStorage:
    """
    Storage persisted as a single JSON object in ``path``.

    A missing file reads as empty. A corrupt file raises ValueError from
    ``get``; callers that treat bad state as "no state" catch it.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.logger = get_module_logger("JsonFileStorage")
        self._write_lock = asyncio.Lock()

    async def _read_document(self) -> Dict[str, Any]:
        if not await asyncio.to_thread(self.path.exists):
            return {}
        async with aiofiles.open(self.path, 'r', encoding='utf-8') as f:
            text = await f.read()
        if not text.strip():
            return {}
        document = json.loads(text)
        if not isinstance(document, dict):
            raise ValueError(f"State file {self.path} does not contain a JSON object")
        return document

    def _sync_to_disk(self, fd: int) -> None:
        # Network mounts and tmpfs may reject fsync
        try:
            os.fsync(fd)
        except OSError as e:
            self.logger.debug("fsync failed for %s: %s", self.path, e)

    def _write_document_sync(self, document: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                dir=str(self.path.parent),
                prefix=f".{self.path.name}.",
                delete=False,
                encoding="utf-8",
            ) as tmp:
                tmp_path = Path(tmp.name)
                json.dump(document, tmp, indent=2, sort_keys=True)
                tmp.flush()
                self._sync_to_disk(tmp.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        finally:
            if tmp_path is not None:
                try:
                    tmp_path.unlink()
                except FileNotFoundError:
                    pass

    async def get(self, key: str) -> Optional[Any]:
        document = await self._read_document()
        return document.get(key)

    async def set(self, key: str, value: Any) -> None:
        async with self._write_lock:
            try:
                document = await self._read_document()
            except ValueError as e:
                self.logger.warning("Discarding unreadable state file %s: %s", self.path, e)
                document = {}
            document[key] = value
            await asyncio.to_thread(self._write_document_sync, document)
        self.logger.debug("Stored %s in %s", key, self.path)


__all__ = ["InMemoryStorage", "JsonFileStorage", "KeyValueStorage"]
