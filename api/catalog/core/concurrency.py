"""Timing helpers for search input and overlapping requests."""
import asyncio
import itertools
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from catalog.core.config import settings


Callback = Callable[..., Union[Any, Awaitable[Any]]]


class Debouncer:
    """Run a callback once input has been quiet for ``delay`` seconds.

    Every ``trigger`` cancels the pending call and restarts the timer,
    so only the last of a burst of calls runs.
    """

    def __init__(self, delay: Optional[float] = None):
        self.delay = settings.SEARCH_DEBOUNCE_MS / 1000 if delay is None else delay
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self, callback: Callback, *args: Any) -> asyncio.Task:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(callback, args))
        return self._task

    async def _run(self, callback: Callback, args: tuple) -> Any:
        await asyncio.sleep(self.delay)
        result = callback(*args)
        if asyncio.iscoroutine(result):
            result = await result
        return result

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    async def flush(self) -> Any:
        """Wait for the pending call, if any, and return its result."""
        task = self._task
        if task is None:
            return None
        try:
            return await task
        except asyncio.CancelledError:
            return None


class RequestSequencer:
    """Hands out increasing tokens per channel; only the newest token is current.

    A response is committed only when the token its request was issued
    with is still current, so a slow earlier response never overwrites
    a later one.
    """

    def __init__(self):
        self._counter = itertools.count(1)
        self._latest: Dict[str, int] = {}

    def next_token(self, channel: str = "default") -> int:
        token = next(self._counter)
        self._latest[channel] = token
        return token

    def is_current(self, token: int, channel: str = "default") -> bool:
        return self._latest.get(channel) == token

    def invalidate(self, channel: str = "default") -> None:
        """Make every outstanding token on ``channel`` stale."""
        self._latest[channel] = next(self._counter)
