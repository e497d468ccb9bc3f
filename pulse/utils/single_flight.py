"""
Single-flight helper: concurrent callers share one in-flight coroutine.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

class SingleFlight(Generic[T]):
    """
    Run at most one instance of an async operation at a time.

    Callers arriving while the operation is running await the same task and
    get the same result (or exception). The task is shielded, so a caller
    being cancelled does not cancel the shared run.
    """

    def __init__(self, func: Callable[[], Awaitable[T]]):
        self._func = func
        self._lock = asyncio.Lock()
        self._task: Optional["asyncio.Task[T]"] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _clear(self, task: "asyncio.Task[T]") -> None:
        if self._task is task:
            self._task = None
        # Every caller may have been cancelled before the run failed
        if not task.cancelled():
            error = task.exception()
            if error is not None:
                logger.debug(f"Shared run failed: {str(error)}")

    async def run(self) -> T:
        async with self._lock:
            if self._task is None or self._task.done():
                self._task = asyncio.ensure_future(self._func())
                self._task.add_done_callback(self._clear)
            else:
                logger.debug("Joining in-flight run")
            task = self._task
        return await asyncio.shield(task)
