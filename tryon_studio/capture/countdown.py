"""Cancelable countdown used before a camera capture."""

import asyncio
from typing import Callable


class Countdown:
    """Counts down ``ticks`` times, ``interval`` seconds apart.

    ``on_tick`` is called with the remaining count (3, 2, 1 for the default)
    before each wait. ``cancel()`` wakes the countdown immediately and it
    reports no completion.
    """

    def __init__(
        self,
        ticks: int = 3,
        interval: float = 1.0,
        on_tick: Callable[[int], None] | None = None,
    ):
        if ticks < 1:
            raise ValueError("countdown needs at least one tick")
        self.ticks = ticks
        self.interval = interval
        self.on_tick = on_tick
        self.remaining = ticks
        self._cancelled = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    async def run(self) -> bool:
        """Run to zero. Returns True if the countdown completed."""
        for remaining in range(self.ticks, 0, -1):
            if self.cancelled:
                return False
            self.remaining = remaining
            if self.on_tick is not None:
                self.on_tick(remaining)
            if self.cancelled:
                return False
            try:
                await asyncio.wait_for(self._cancelled.wait(), timeout=self.interval)
                return False
            except asyncio.TimeoutError:
                pass
        self.remaining = 0
        return not self.cancelled
