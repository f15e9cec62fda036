from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

log = structlog.get_logger()


class Debouncer:
    """Run an async callback only after ``delay`` seconds without a new trigger.

    Each ``trigger()`` cancels the armed timer and starts a fresh one. Once a
    timer fires, the callback runs as a task that is never cancelled by later
    triggers; callers that care about stale completions must check for them.
    A callback that raises is logged with its traceback when its task ends.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[..., Coroutine[Any, Any, None]],
    ) -> None:
        self._delay = delay
        self._callback = callback
        self._timer: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        """True while a timer is armed and has not fired yet."""
        return self._timer is not None

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def trigger(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._delay, self._fire, args)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self, args: tuple[Any, ...]) -> None:
        self._timer = None
        task = asyncio.create_task(self._callback(*args))
        self._tasks.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error(
                "debounced_call_failed",
                callback=getattr(self._callback, "__qualname__", repr(self._callback)),
                exc_info=exc,
            )

    async def wait_idle(self) -> None:
        """Wait until no timer is armed and every fired callback has finished."""
        while self._timer is not None or self._tasks:
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
            else:
                await asyncio.sleep(self._delay / 4 or 0.001)
