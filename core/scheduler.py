import logging
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from core.config import settings
from features.logs.models.log_types import BackfillCriteria, BackfillGroup
from features.logs.services.backfill_service import BackfillService

logger = logging.getLogger(__name__)

class Scheduler:
    def __init__(self, backfill_service: BackfillService):
        self.scheduler = AsyncIOScheduler()
        self.backfill_service = backfill_service

    async def run_nightly_backfill(self) -> None:
        """Backfill every configured field group, one after another."""
        for group in settings.backfill_groups:
            try:
                result = await self.backfill_service.backfill(
                    BackfillCriteria(group=BackfillGroup(group))
                )
                logger.info(f"Nightly {group} backfill updated {result.updated_count} of {result.scanned_count} rows")
            except Exception as e:
                logger.error(f"Nightly {group} backfill failed: {str(e)}")

    def start(self):
        """Start the scheduler with the nightly backfill job."""
        logger.info("Starting scheduler")

        self.scheduler.add_job(
            self.run_nightly_backfill,
            CronTrigger(hour=settings.backfill_cron_hour),
            id='nightly_backfill',
            name='nightly_backfill'
        )

        self.scheduler.start()
        logger.info("Scheduler started successfully")

    def get_next_run_time(self, job_id: str = "nightly_backfill") -> Optional[str]:
        """Get the next run time for a scheduled job."""
        job = self.scheduler.get_job(job_id)
        if job and job.next_run_time:
            return job.next_run_time.isoformat()
        return None

    def shutdown(self):
        """Shutdown the scheduler."""
        if self.scheduler.running:
            logger.info("Shutting down scheduler")
            self.scheduler.shutdown()
            logger.info("Scheduler shutdown complete")
