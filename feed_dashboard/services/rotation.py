"""
Timed rotation between feeds.

This module provides the RotationScheduler class. While enabled it runs two
asyncio timers: one that advances the active feed every period, and a faster
one that moves a progress fraction from 0 toward 1 for the progress bar.
Both timers are always started and cancelled together.
"""

import asyncio
import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = 30.0
TICKS_PER_PERIOD = 300


def next_index(index: int, count: int) -> int:
    """Index of the feed after `index`, wrapping past the last one."""
    return (index + 1) % count


class RotationScheduler:
    """
    Advances the selection on a fixed period while enabled.

    on_tick, if given, runs after every `notify_every` progress steps so the
    view can redraw the progress bar. Errors raised by either callback are
    logged and never stop the timers.
    """

    def __init__(
        self,
        advance: Callable[[], None],
        period: float = DEFAULT_PERIOD,
        ticks_per_period: int = TICKS_PER_PERIOD,
        on_tick: Optional[Callable[[], None]] = None,
        notify_every: int = 1,
    ):
        if period <= 0:
            raise ValueError("Rotation period must be positive.")
        self.advance = advance
        self.period = period
        self.ticks_per_period = ticks_per_period
        self.on_tick = on_tick
        self.notify_every = max(1, notify_every)
        self._ticks = 0
        self._tasks: List[asyncio.Task] = []

    @property
    def enabled(self) -> bool:
        return bool(self._tasks) and not any(task.done() for task in self._tasks)

    @property
    def elapsed_fraction(self) -> float:
        return self._ticks / self.ticks_per_period

    def enable(self) -> None:
        """Starts both timers. Must be called from a running event loop."""
        if self.enabled:
            return
        self.disable()
        self._tasks = [
            asyncio.create_task(self._advance_loop()),
            asyncio.create_task(self._progress_loop()),
        ]
        logger.info("Rotation enabled (every %.1fs).", self.period)

    def disable(self) -> None:
        """Cancels both timers and resets progress."""
        was_enabled = self.enabled
        for task in self._tasks:
            task.cancel()
        self._tasks = []
        self._ticks = 0
        if was_enabled:
            logger.info("Rotation disabled.")

    def toggle(self) -> bool:
        if self.enabled:
            self.disable()
        else:
            self.enable()
        return self.enabled

    async def aclose(self) -> None:
        """Disables rotation and waits for both timers to finish."""
        tasks = list(self._tasks)
        self.disable()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def rotate(self) -> None:
        """One scheduled advance."""
        self._ticks = 0
        logger.debug("Rotating to next feed.")
        self.advance()

    def tick(self) -> bool:
        """One progress step; stays below 1 until the next advance. Returns True if it moved."""
        if self._ticks + 1 < self.ticks_per_period:
            self._ticks += 1
            return True
        return False

    async def _advance_loop(self) -> None:
        while True:
            await asyncio.sleep(self.period)
            try:
                self.rotate()
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Error advancing rotation: %s", e)

    async def _progress_loop(self) -> None:
        interval = self.period / self.ticks_per_period
        while True:
            await asyncio.sleep(interval)
            if self.tick() and self.on_tick and self._ticks % self.notify_every == 0:
                try:
                    self.on_tick()
                except Exception as e:  # pylint: disable=broad-exception-caught
                    logger.error("Error rendering rotation progress: %s", e)
