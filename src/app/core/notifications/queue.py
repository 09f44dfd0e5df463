"""Detached notification tasks with observed failures."""

import asyncio
from collections.abc import Coroutine
from functools import lru_cache, partial
from typing import Any

from src.app.core.logging import get_logger

logger = get_logger(__name__)


class NotificationQueue:
    """Registry of best-effort notification tasks.

    Each submitted coroutine runs as its own asyncio task, detached from the
    request that queued it. A done-callback logs every failure, so a failed
    send is always observed even though the caller never awaits it.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()
        self.failure_count = 0

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    def submit(
        self, name: str, coro: Coroutine[Any, Any, Any], **log_context: Any
    ) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro, name=f"notification:{name}")
        self._tasks.add(task)
        task.add_done_callback(partial(self._on_done, name, log_context))
        return task

    def _on_done(self, name: str, log_context: dict[str, Any], task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            self.failure_count += 1
            logger.warning("Notification cancelled", notification=name, **log_context)
            return
        exc = task.exception()
        if exc is not None:
            self.failure_count += 1
            logger.error(
                "Notification failed",
                notification=name,
                error=str(exc),
                error_type=type(exc).__name__,
                **log_context,
            )
        else:
            logger.debug("Notification delivered", notification=name, **log_context)

    async def drain(self, timeout: float | None = None) -> bool:
        """Wait for queued notifications. Returns False if some are still running."""
        if not self._tasks:
            return True
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        return not pending


@lru_cache
def get_notification_queue() -> NotificationQueue:
    return NotificationQueue()
