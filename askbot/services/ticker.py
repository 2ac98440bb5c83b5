"""Periodic "still working" animation for a pending reply."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable


log = logging.getLogger(__name__)


DEFAULT_MAX_TICKS = 4


class ProgressTicker:
    """Re-render a progress message on a fixed cadence until stopped.

    ``tick`` runs 1..max_ticks and wraps, so ``render`` can draw a growing
    row of dots. Once ``stop`` returns, ``emit`` will not be called again:
    a sleeping ticker is cancelled outright, and an emit that is already in
    flight is allowed to finish first so it cannot land after whatever the
    caller sends next.
    """

    def __init__(
        self,
        interval_seconds: float,
        render: Callable[[int], str],
        emit: Callable[[str], Awaitable[object]],
        max_ticks: int = DEFAULT_MAX_TICKS,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if max_ticks < 1:
            raise ValueError("max_ticks must be at least 1")
        self.interval_seconds = interval_seconds
        self.max_ticks = max_ticks
        self._render = render
        self._emit = emit
        self._tick = 0
        self._emitted = 0
        self._stopped = False
        self._emitting = False
        self._task: asyncio.Task[None] | None = None

    @classmethod
    def start(
        cls,
        interval_seconds: float,
        render: Callable[[int], str],
        emit: Callable[[str], Awaitable[object]],
        max_ticks: int = DEFAULT_MAX_TICKS,
    ) -> "ProgressTicker":
        ticker = cls(interval_seconds, render, emit, max_ticks=max_ticks)
        ticker._task = asyncio.create_task(ticker._run())
        return ticker

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def emitted(self) -> int:
        """Number of frames handed to ``emit`` so far."""
        return self._emitted

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while not self._stopped:
            await asyncio.sleep(self.interval_seconds)
            if self._stopped:
                return
            self._tick = (self._tick % self.max_ticks) + 1
            text = self._render(self._tick)
            self._emitting = True
            try:
                await self._emit(text)
                self._emitted += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # A dropped frame is harmless; the next tick or the final edit replaces it
                log.debug("Progress update failed (tick=%d): %s", self._tick, e)
            finally:
                self._emitting = False

    async def stop(self) -> None:
        """Stop ticking; returns once no further emit can start."""
        self._stopped = True
        task = self._task
        if task is None or task.done():
            return
        if not self._emitting:
            task.cancel()
        # gather reports the task's own cancellation as a result instead of raising it
        await asyncio.gather(task, return_exceptions=True)
