"""Hourly trigger for the collection pipeline."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING_CYCLE = "running-cycle"


def next_hourly_tick(now: datetime) -> datetime:
    """Top of the hour strictly after ``now``."""
    return now.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HourlyScheduler:
    """Runs a job at startup and then at minute 0 of every hour.

    A trigger that arrives while the previous job is still running is skipped.
    """

    def __init__(
        self,
        job: Callable[[], object],
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._job = job
        self._clock = clock
        self._cycle_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._state = SchedulerState.IDLE
        self._cycles_run = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def cycles_run(self) -> int:
        return self._cycles_run

    def trigger(self) -> bool:
        """Run the job now unless a run is already in progress. Returns True if it ran."""
        if not self._cycle_lock.acquire(blocking=False):
            logger.warning("Previous collection cycle still running, skipping this tick")
            return False
        try:
            self._state = SchedulerState.RUNNING_CYCLE
            self._job()
            self._cycles_run += 1
        finally:
            self._state = SchedulerState.IDLE
            self._cycle_lock.release()
        return True

    def _wait_until(self, due: datetime) -> bool:
        """Sleep until the clock reaches ``due``. Returns True if stopped first."""
        while True:
            remaining = (due - self._clock()).total_seconds()
            if remaining <= 0:
                return False
            if self._stop_event.wait(timeout=remaining):
                return True

    def run(self) -> None:
        """Trigger immediately, then on every hourly tick until stopped."""
        logger.info("Scheduler started, running first collection cycle now")
        due = next_hourly_tick(self._clock())
        while not self._stop_event.is_set():
            self.trigger()

            now = self._clock()
            if now >= due:
                logger.warning(
                    "Collection cycle overran the %s tick, skipping to the next one",
                    due.isoformat(),
                )
                due = next_hourly_tick(now)

            logger.info(
                "Next collection cycle at %s (in %.0fs)",
                due.isoformat(),
                (due - now).total_seconds(),
            )
            # Early wakeups keep waiting, so one tick never runs twice
            if self._wait_until(due):
                break
            due = next_hourly_tick(due)
        logger.info("Scheduler stopped after %d cycles", self._cycles_run)

    def stop(self) -> None:
        """Signal the loop to exit; wakes it if it is waiting for a tick."""
        self._stop_event.set()
