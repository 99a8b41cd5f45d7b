"""
Periodic sweep of expired cache entries.
Uses APScheduler so the sweep runs on its own, independent of reads.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from dspace_client.services.cache import CacheRegistry


class CacheSweeper:
    """Runs CacheRegistry.sweep_expired on a fixed interval."""

    JOB_ID = "cache_sweep_job"

    def __init__(self, caches: CacheRegistry, interval_seconds: int = 60):
        self.caches = caches
        self.interval_seconds = interval_seconds
        self.scheduler = AsyncIOScheduler()
        self._is_running = False

    async def sweep(self) -> int:
        """
        Sweep all stores once.

        Must stay a coroutine: AsyncIOScheduler runs coroutine jobs on the
        event loop and plain functions on an executor thread.
        """
        removed = self.caches.sweep_expired()
        if removed:
            logger.debug(f"Cache sweep removed {removed} expired entries")
        return removed

    def start(self) -> None:
        """Start the sweep job. Must be called from a running event loop."""
        if self._is_running:
            logger.warning("Cache sweeper is already running")
            return

        self.scheduler.add_job(
            self.sweep,
            trigger="interval",
            seconds=self.interval_seconds,
            id=self.JOB_ID,
            name="Cache Sweeper",
            replace_existing=True,
        )
        self.scheduler.start()
        self._is_running = True

        logger.info(f"Cache sweeper started: sweeping every {self.interval_seconds}s")

    def stop(self) -> None:
        if not self._is_running:
            return

        self.scheduler.shutdown(wait=False)
        self._is_running = False
        logger.info("Cache sweeper stopped")

    def is_running(self) -> bool:
        return self._is_running
