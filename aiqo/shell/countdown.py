"""Countdown Runner - Drives rest and cook countdowns on the event loop.

Each timer kind has at most one tick task. Starting a kind cancels that kind's
previous task only; a cook countdown never stops a rest countdown.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..core.timers import IDLE, Countdown, TimerKind, TimerStatus, cancel, start_countdown, tick


logger = logging.getLogger(__name__)

ExpiryCallback = Callable[[TimerKind], Awaitable[None] | None]


class CountdownRunner:
    """Schedules one tick per interval for each running countdown."""

    def __init__(self, interval: float = 1.0, on_expire: Optional[ExpiryCallback] = None) -> None:
        """Initialize runner.

        Args:
            interval: Seconds between ticks
            on_expire: Called with the timer kind when a countdown reaches zero
        """
        self.interval = interval
        self.on_expire = on_expire
        self._states: dict[TimerKind, Countdown] = {kind: IDLE for kind in TimerKind}
        self._tasks: dict[TimerKind, asyncio.Task] = {}

    def state(self, kind: TimerKind) -> Countdown:
        return self._states[kind]

    def start(self, kind: TimerKind, seconds: int) -> Countdown:
        """Start (or restart) the countdown for a kind.

        Must be called from a running event loop.
        """
        self.cancel(kind)
        countdown = start_countdown(seconds)
        self._states[kind] = countdown
        logger.info("Started %s countdown: %ds", kind.value, seconds)
        if countdown.status is TimerStatus.RUNNING:
            self._tasks[kind] = asyncio.get_running_loop().create_task(self._run(kind))
        return countdown

    def cancel(self, kind: TimerKind) -> None:
        """Stop a kind's countdown and drop its pending tick."""
        task = self._tasks.pop(kind, None)
        if task is not None and not task.done():
            task.cancel()
        self._states[kind] = cancel(self._states[kind])

    async def shutdown(self) -> None:
        """Cancel all countdowns and wait for their tasks to finish."""
        tasks = list(self._tasks.values())
        for kind in TimerKind:
            self.cancel(kind)
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, kind: TimerKind) -> None:
        while self._states[kind].status is TimerStatus.RUNNING:
            await asyncio.sleep(self.interval)
            self._states[kind] = tick(self._states[kind])

        self._tasks.pop(kind, None)
        logger.info("%s countdown finished", kind.value.capitalize())
        if self.on_expire is not None:
            try:
                result = self.on_expire(kind)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("Expiry callback failed for %s countdown", kind.value)
