"""Background scheduler for housekeeping tasks"""

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .access_service import access_service
from .log_service import log_service


class SchedulerService:
    """Manages scheduled background tasks"""

    TOKEN_PURGE_JOB = "purge_access_tokens"

    def __init__(self, purge_interval_seconds: int = 60):
        self.scheduler = AsyncIOScheduler()
        self.purge_interval_seconds = purge_interval_seconds
        self.is_running = False

    async def start(self):
        """Start the scheduler"""
        if self.is_running:
            return

        log_service.info("Starting background scheduler")
        self.scheduler.start()
        self.is_running = True
        self.configure_jobs()
        log_service.info("Background scheduler started successfully")

    async def stop(self):
        """Stop the scheduler"""
        if not self.is_running:
            return

        log_service.info("Stopping background scheduler")
        try:
            # Shutdown scheduler in executor to avoid blocking
            loop = asyncio.get_event_loop()
            await asyncio.wait_for(
                loop.run_in_executor(None, self.scheduler.shutdown, False), timeout=2.0
            )
        except asyncio.TimeoutError:
            log_service.error("Scheduler shutdown timed out, forcing stop")
        finally:
            self.is_running = False
            log_service.info("Background scheduler stopped")

    def configure_jobs(self):
        """(Re)register the periodic jobs"""
        self.scheduler.add_job(
            self._purge_access_tokens,
            trigger=IntervalTrigger(seconds=self.purge_interval_seconds),
            id=self.TOKEN_PURGE_JOB,
            name="Purge unused player access tokens",
            replace_existing=True,
        )

    async def _purge_access_tokens(self):
        """Execute token purge task"""
        purged = access_service.purge_expired()
        if purged:
            log_service.info(f"Purged {purged} expired player access tokens")


# Global scheduler instance
scheduler_service = SchedulerService()
