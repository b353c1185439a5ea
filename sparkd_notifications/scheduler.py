import asyncio
import logging
from datetime import timedelta

from .jobs.cleanup import NotificationCleanupJob

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """Runs the notification cleanup job on a fixed interval until stopped."""

    def __init__(self, job: NotificationCleanupJob, interval: timedelta, run_on_start: bool = False):
        self.job = job
        self.interval = interval
        self.run_on_start = run_on_start
        self._stop = asyncio.Event()

    def stop(self) -> None:
        self._stop.set()

    async def _wait_interval(self) -> bool:
        """Sleep one interval; True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=self.interval.total_seconds())
            return True
        except asyncio.TimeoutError:
            return False

    async def run(self) -> None:
        logger.info(f"Cleanup scheduled every {self.interval}")

        if self.run_on_start:
            await self.job.run()

        while not self._stop.is_set():
            if await self._wait_interval():
                break
            await self.job.run()

        logger.info("Cleanup scheduler stopped")
