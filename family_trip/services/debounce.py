"""
Single-slot deferred task.
Each ``schedule`` call replaces the waiting run; a run that is already in
flight is left to finish and the next one queues behind it, so the action
never runs twice at the same time.
"""
import asyncio
from typing import Awaitable, Callable, Optional


class DebouncedTask:
    """Runs ``action`` once the calls to ``schedule`` have been quiet for ``delay`` seconds."""

    def __init__(self, action: Callable[[], Awaitable[None]], delay: float):
        self._action = action
        self.delay = delay
        self._waiting: Optional[asyncio.Task] = None
        self._running: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        """A run is scheduled but has not started yet."""
        return self._waiting is not None and not self._waiting.done()

    @property
    def running(self) -> bool:
        return self._running is not None and not self._running.done()

    def schedule(self) -> None:
        """Cancel any waiting run and start the quiet period again. Needs a running loop."""
        loop = asyncio.get_running_loop()
        self.cancel()
        self._waiting = loop.create_task(self._run_later())

    def cancel(self) -> None:
        """Drop the waiting run. A run in flight is not interrupted."""
        if self.pending:
            self._waiting.cancel()
        self._waiting = None

    async def join(self) -> None:
        """Wait until no run is in flight."""
        while self.running:
            await asyncio.wait({self._running})

    async def flush(self) -> None:
        """Wait for the run in flight, then run a waiting one now instead of after the delay."""
        had_waiting = self.pending
        self.cancel()
        await self.join()
        if had_waiting:
            await self._start()

    def _start(self) -> asyncio.Task:
        self._running = asyncio.get_running_loop().create_task(self._action())
        return self._running

    async def _run_later(self) -> None:
        try:
            await asyncio.sleep(self.delay)
            await self.join()
        except asyncio.CancelledError:
            return
        self._waiting = None
        self._start()
