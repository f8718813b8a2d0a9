"""Stale-response guarding and debouncing for interactive lookups."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

# Delay before a typed keyword is sent for suggestions
DEFAULT_DEBOUNCE_SECONDS = 0.4


class RequestSequencer:
    """Monotonic request counter.

    Each dispatch takes a number from issue(); when the response arrives it
    is applied only if is_current() still holds for that number. Anything
    that makes in-flight responses irrelevant calls invalidate().
    """

    def __init__(self) -> None:
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def invalidate(self) -> None:
        self._latest += 1

    def is_current(self, sequence: int) -> bool:
        return sequence == self._latest


class Debouncer:
    """Run only the last of a burst of calls, after a quiet period."""

    def __init__(self, delay: float = DEFAULT_DEBOUNCE_SECONDS):
        self.delay = delay
        self._task: asyncio.Task | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def call(self, func: Callable[..., Awaitable[None]], *args) -> asyncio.Task:
        """Schedule func(*args), cancelling any call still waiting."""
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(func, *args))
        return self._task

    async def _run(self, func: Callable[..., Awaitable[None]], *args) -> None:
        await asyncio.sleep(self.delay)
        await func(*args)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def flush(self) -> None:
        """Wait for the scheduled call, if any, to finish."""
        task = self._task
        if task is None:
            return
        await asyncio.wait({task})
        if task.cancelled():
            logger.debug("Debounced call was cancelled before it ran")
            return
        task.result()
