"""Lifecycle tracking for in-flight exchange tasks."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

LOGGER = logging.getLogger(__name__)


class TaskManager:
    """Keep references to background tasks until they finish or are cancelled."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def in_flight(self) -> int:
        """Number of tracked tasks that have not finished."""
        return sum(1 for task in self._tasks if not task.done())

    def add(self, task: asyncio.Task[Any]) -> asyncio.Task[Any]:
        """Track ``task``; it is forgotten automatically once done."""
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        task.add_done_callback(self._log_exception)
        return task

    @staticmethod
    def _log_exception(task: asyncio.Task[Any]) -> None:
        """Log unhandled exceptions so they are not silently lost."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.warning(
                "task.exception",
                extra={
                    "event": "task.exception",
                    "task": task.get_name(),
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )

    async def cancel_all(self) -> None:
        """Cancel every tracked task and wait for them to unwind."""
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        for task in pending:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks.clear()

    async def await_all(self) -> None:
        """Wait for all tracked tasks without cancelling them."""
        for task in list(self._tasks):
            if not task.done():
                try:
                    await task
                except asyncio.CancelledError:
                    pass
