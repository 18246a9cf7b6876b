"""
Cancellable periodic work on the asyncio event loop.

PeriodicTask fires an async callback every `interval` seconds. A tick that
is still running when the next one is due causes that next tick to be
skipped, so one sampler never races itself. Stopping cancels the schedule;
a tick already in flight runs to completion and is expected to check the
session state before touching it.

CountdownTimer is the per-question hard countdown with one-second steps.
"""

import asyncio
from typing import Awaitable, Callable, Optional


class PeriodicTask:
    """Start/stop handle around a fixed-interval async callback."""

    def __init__(self, name: str, interval: float, callback: Callable[[], Awaitable[None]]):
        self.name = name
        self.interval = interval
        self.callback = callback
        self.ticks = 0
        self.skipped = 0
        self._task: Optional[asyncio.Task] = None
        self._in_flight: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=f"{self.name}-schedule")

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def wait_idle(self):
        """Wait for an in-flight tick to finish (used on shutdown and in tests)."""
        if self._in_flight is not None and not self._in_flight.done():
            await asyncio.gather(self._in_flight, return_exceptions=True)

    async def _run(self):
        loop = asyncio.get_running_loop()
        while True:
            await asyncio.sleep(self.interval)
            if self._in_flight is not None and not self._in_flight.done():
                self.skipped += 1
                print(f"[SCHEDULER] {self.name}: previous tick still running, skipping")
                continue
            self._in_flight = loop.create_task(self._tick(), name=f"{self.name}-tick")

    async def _tick(self):
        self.ticks += 1
        try:
            await self.callback()
        except Exception as e:
            print(f"[SCHEDULER] {self.name} tick failed: {e}")


class CountdownTimer:
    """
    Counts `seconds` down in `step` increments, then calls on_expire.

    on_tick receives the remaining whole seconds before each step. Restarting
    cancels the previous countdown; a timer may restart itself from inside
    on_expire.
    """

    def __init__(self, seconds: int, on_tick: Callable[[int], None],
                 on_expire: Callable[[], None], step: float = 1.0):
        self.seconds = seconds
        self.on_tick = on_tick
        self.on_expire = on_expire
        self.step = step
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        self.stop()
        self._task = asyncio.get_running_loop().create_task(self._run(), name="question-countdown")

    def stop(self):
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def _run(self):
        for remaining in range(self.seconds, 0, -1):
            self.on_tick(remaining)
            await asyncio.sleep(self.step)
        self.on_tick(0)
        self.on_expire()
