"""
Catalog Refresh Scheduler

Runs the TMDB ingestion nightly with APScheduler and remembers the
outcome of the last run so the admin API can report it.
"""

from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from ..config import get_settings
from ..core.logging import get_logger
from ..models.response import IngestionSummary

logger = get_logger(__name__)
settings = get_settings()

INGESTION_JOB_ID = "catalog_ingestion"

# A refresh missed by more than this (e.g. the host slept) is skipped
MISFIRE_GRACE_SECONDS = 3600


async def _default_runner() -> IngestionSummary:
    from ..jobs.ingestion import run_ingestion_job
    return await run_ingestion_job()


class SchedulerService:
    """
    Owns the AsyncIOScheduler and the nightly ingestion job.

    The job fires daily at `ingestion_cron_hour:ingestion_cron_minute`
    UTC and never overlaps with itself. Manual triggers bypass the
    scheduler but share the same last-run bookkeeping.
    """

    def __init__(self, runner: Optional[Callable[[], Awaitable[IngestionSummary]]] = None):
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.runner = runner or _default_runner
        self.last_summary: Optional[IngestionSummary] = None
        self.last_error: Optional[str] = None
        self.last_finished_at: Optional[datetime] = None

    async def run_ingestion(self) -> Optional[IngestionSummary]:
        """Run one refresh; a crash is logged and recorded, not raised."""
        logger.info("scheduled_ingestion_started")
        try:
            summary = await self.runner()
        except Exception as e:
            logger.error("scheduled_ingestion_crashed", error=str(e))
            self.last_summary, self.last_error = None, str(e)
            self.last_finished_at = datetime.now(timezone.utc)
            return None

        self.last_summary, self.last_error = summary, None
        self.last_finished_at = datetime.now(timezone.utc)
        logger.info(
            "scheduled_ingestion_finished",
            generation=summary.generation,
            failed_batches=summary.failed_batches,
        )
        return summary

    def start(self):
        if self.scheduler.running:
            return

        trigger = CronTrigger(
            hour=settings.ingestion_cron_hour,
            minute=settings.ingestion_cron_minute,
            timezone="UTC",
        )
        self.scheduler.add_job(
            self.run_ingestion,
            trigger=trigger,
            id=INGESTION_JOB_ID,
            name="Catalog Ingestion",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
        )
        self.scheduler.start()
        logger.info(
            "scheduler_started",
            ingestion_schedule=f"daily at {settings.ingestion_cron_hour:02d}:{settings.ingestion_cron_minute:02d} UTC",
        )

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=True)
            logger.info("scheduler_stopped")

    def get_job_status(self) -> dict:
        """Scheduler state, the next planned refresh and the last outcome."""
        job = self.scheduler.get_job(INGESTION_JOB_ID)
        next_run = job.next_run_time if job is not None else None

        return {
            "running": self.scheduler.running,
            "nextRun": next_run.isoformat() if next_run else None,
            "lastFinishedAt": self.last_finished_at.isoformat() if self.last_finished_at else None,
            "lastError": self.last_error,
            "lastSummary": (
                self.last_summary.model_dump(by_alias=True, mode="json")
                if self.last_summary else None
            ),
        }

    async def trigger_ingestion_now(self) -> Optional[IngestionSummary]:
        logger.info("manual_trigger", job="ingestion")
        return await self.run_ingestion()


# Singleton instance
_scheduler_service: Optional[SchedulerService] = None


def get_scheduler_service() -> SchedulerService:
    """Get singleton SchedulerService instance."""
    global _scheduler_service
    if _scheduler_service is None:
        _scheduler_service = SchedulerService()
    return _scheduler_service
