from __future__ import annotations

import asyncio
from typing import Any, Coroutine, Set

import structlog

from src.adapters.metrics import Metrics


logger = structlog.get_logger(__name__)


class DetachedTasks:
    """Fire-and-forget task spawner with a bounded shutdown drain.

    spawn() schedules a coroutine on the running loop and returns at once; the
    caller never awaits the result. Strong references are held until each task
    finishes so the loop cannot garbage-collect it mid-flight. Failures are
    logged and counted, never re-raised and never retried.

    drain() is called once on shutdown: it waits for outstanding tasks up to a
    deadline and cancels whatever is still pending after it.
    """

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            Metrics.inc("counter_write_failed", task=task.get_name())
            logger.warning(
                "detached_task_failed",
                task=task.get_name(),
                error=str(exc),
                error_type=type(exc).__name__,
            )

    async def drain(self, timeout_s: float = 5.0) -> int:
        """Wait for outstanding tasks; return how many were abandoned."""
        if not self._tasks:
            return 0
        outstanding = set(self._tasks)
        _, pending = await asyncio.wait(outstanding, timeout=max(0.0, timeout_s))
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            Metrics.inc("detached_tasks_abandoned")
            logger.warning("detached_tasks_abandoned", count=len(pending), timeout_s=timeout_s)
        return len(pending)
