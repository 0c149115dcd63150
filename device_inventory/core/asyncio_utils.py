"""Background work scheduled from the synchronous device-system path.

Selection saves and endpoint hint lookups are triggered from listener
callbacks that must not await. ``BackgroundTasks`` turns those coroutines
into tracked tasks on the running loop and logs their failures; from plain
synchronous code (no running loop) the work is dropped instead.
"""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, Optional

from .logging_utils import StructuredLogger, get_module_logger


def running_loop() -> Optional[asyncio.AbstractEventLoop]:
    """Return the running event loop, or None when called from sync code."""
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class BackgroundTasks:
    """Tracks fire-and-forget tasks so they can be drained before shutdown."""

    def __init__(self, logger: Optional[StructuredLogger] = None):
        self._logger = logger or get_module_logger("BackgroundTasks")
        self._pending: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._pending)

    def schedule(self, coro: Coroutine[Any, Any, Any], context: str) -> Optional[asyncio.Task[Any]]:
        """Run ``coro`` on the running loop; returns None if there is none."""
        loop = running_loop()
        if loop is None:
            coro.close()
            self._logger.debug("No running event loop, skipping %s", context)
            return None

        task = loop.create_task(coro, name=context)
        self._pending.add(task)
        task.add_done_callback(lambda done: self._finished(done, context))
        return task

    def _finished(self, task: asyncio.Task[Any], context: str) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._logger.error("Unhandled exception in %s: %s", context, exc, exc_info=exc)

    async def drain(self) -> None:
        """Wait until every task (including ones scheduled meanwhile) is done."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


__all__ = ["BackgroundTasks", "running_loop"]
