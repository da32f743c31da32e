"""
Countdown presentation

The countdown is derived from the shared end timestamp on every tick, so a
stalled or late tick only delays the display, never skews it. The time-up
callback is latched and fires once however many times tick() runs.
"""
import asyncio
import logging
import time
from typing import Callable, Optional

from enigma.models import TimerReading


logger = logging.getLogger(__name__)

LOW_TIME_THRESHOLD = 300.0   # 5 minutes
WARNING_THRESHOLD = 120.0    # 2 minutes


def format_remaining(seconds: float) -> str:
    """Render seconds as MM:SS (minutes are not wrapped at the hour)"""
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


class Countdown:
    """Remaining-time view over a shared end timestamp"""

    def __init__(
        self,
        end_time: Optional[float],
        on_time_up: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.time,
        low_time_threshold: float = LOW_TIME_THRESHOLD,
        warning_threshold: float = WARNING_THRESHOLD,
    ):
        self.end_time = end_time
        self.on_time_up = on_time_up
        self.clock = clock
        self.low_time_threshold = low_time_threshold
        self.warning_threshold = warning_threshold
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def set_end_time(self, end_time: Optional[float]) -> None:
        self.end_time = end_time

    def reading(self) -> TimerReading:
        if self.end_time is None:
            # Not started yet: nothing to count down
            return TimerReading(remaining=0.0, minutes=0, seconds=0)

        remaining = max(0.0, self.end_time - self.clock())
        whole = int(remaining)
        return TimerReading(
            remaining=remaining,
            minutes=whole // 60,
            seconds=whole % 60,
            low_time=remaining < self.low_time_threshold,
            warning=remaining < self.warning_threshold,
            expired=remaining <= 0,
        )

    def tick(self) -> TimerReading:
        """Recompute the reading; fire on_time_up the first time it expires"""
        reading = self.reading()
        if reading.expired and not self._fired:
            self._fired = True
            logger.info("⏰ Time is up")
            if self.on_time_up is not None:
                self.on_time_up()
        return reading


class CountdownTicker:
    """Single cancellable task driving Countdown.tick()"""

    def __init__(self, countdown: Countdown, interval: float = 1.0):
        self.countdown = countdown
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    def cancel(self) -> None:
        """Request cancellation without waiting (safe to call from the task itself)"""
        task = self._task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            self.countdown.tick()
            if self.countdown.fired:
                return
            await asyncio.sleep(self.interval)
