"""
Countdown Clock
---------------

Counts down the time left on a ride. The clock runs a background task per
rental that calls back into its owner once every interval; the owner then
calls :meth:`CountdownClock.tick` with the rental so that only the owner
ever changes it.

Time only runs while the bike is being ridden. When a rider tries to end
the ride, the clock keeps going but the ticks do nothing, so dropping back
into the ride picks up the count where it left off.
"""
import asyncio
from asyncio import CancelledError, Task, sleep
from contextlib import suppress
from datetime import timedelta
from typing import Callable, Optional

from deisbikes import logger
from deisbikes.config import tick_interval
from deisbikes.models import Rental, RentalState


class CountdownClock:

    def __init__(self, interval: timedelta = None):
        self.interval = interval if interval is not None else tick_interval
        self._task: Optional[Task] = None

    @staticmethod
    def tick(rental: Optional[Rental]) -> bool:
        """
        Takes a second off the rental if it is in a ride.

        :return: Whether this tick was the one that ran the time out.
        """
        if rental is None or rental.state is not RentalState.IN_RIDE or rental.remaining_seconds <= 0:
            return False

        rental.remaining_seconds -= 1
        return rental.remaining_seconds == 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, callback: Callable[[], None]):
        """Starts calling the callback every interval, replacing any previous task."""
        self.stop()
        self._task = asyncio.get_event_loop().create_task(self._run(callback))

    def stop(self):
        """Stops the tick task. Safe to call when nothing is running."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def wait_stopped(self):
        """Stops the tick task and waits for it to finish unwinding."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with suppress(CancelledError):
            await task

    async def _run(self, callback: Callable[[], None]):
        while True:
            await sleep(self.interval.total_seconds())
            try:
                callback()
            except Exception:
                logger.exception("Clock tick failed")
