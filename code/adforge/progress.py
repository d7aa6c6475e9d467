"""Cosmetic progress for long jobs whose backend reports little or nothing.

The value creeps toward the cap (95%) on a fixed tick and never reaches 100%
on its own; ``complete()`` snaps it to 100% the moment the real job finishes.
It runs independently of the job poller.
"""
from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable, Optional

import structlog

log = structlog.get_logger(__name__)

DEFAULT_DURATION_S = 45 * 60
DEFAULT_TICK_S = 0.5
DEFAULT_CAP = 95.0


def advance(value: float, increment: float, cap: float = DEFAULT_CAP) -> float:
    """One tick of cosmetic progress, never past *cap*."""
    return min(cap, value + increment)


class FakeProgress:
    def __init__(
        self,
        duration_s: float = DEFAULT_DURATION_S,
        tick_s: float = DEFAULT_TICK_S,
        cap: float = DEFAULT_CAP,
        on_update: Optional[Callable[[float], Any]] = None,
    ) -> None:
        if duration_s <= 0 or tick_s <= 0:
            raise ValueError("duration_s and tick_s must be positive")
        self.tick_s = tick_s
        self.cap = cap
        self.increment = 100.0 / (duration_s / tick_s)
        self.on_update = on_update
        self.value = 0.0
        self.completed = False
        self._task: Optional[asyncio.Task] = None

    async def _emit(self) -> None:
        if self.on_update is None:
            return
        outcome = self.on_update(self.value)
        if inspect.isawaitable(outcome):
            await outcome

    async def tick(self) -> float:
        if not self.completed:
            self.value = advance(self.value, self.increment, self.cap)
            await self._emit()
        return self.value

    async def _run(self) -> None:
        while not self.completed:
            await asyncio.sleep(self.tick_s)
            await self.tick()

    def start(self) -> "FakeProgress":
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(), name="fake-progress")
        return self

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def complete(self) -> None:
        """The real job finished: jump to 100% and stop ticking."""
        await self.stop()
        self.completed = True
        self.value = 100.0
        log.debug("fake_progress_completed")
        await self._emit()

    async def reset(self) -> None:
        await self.stop()
        self.completed = False
        self.value = 0.0
