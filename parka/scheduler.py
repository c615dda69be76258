# parka/scheduler.py

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from parka.core.config import Settings
from parka.services.medication_scheduler import MedicationScheduler

logger = logging.getLogger(__name__)


async def run_daily_sweep(medication_scheduler: MedicationScheduler):
    """
    Expires yesterday's medication entries and creates today's.
    Declared async so the job runs on the event loop with the HTTP handlers.
    """
    logger.info(f"Starting daily medication sweep for {medication_scheduler.today().isoformat()}.")
    entries = medication_scheduler.generate_daily_entries()
    logger.info(f"Daily sweep complete. {len(entries)} entries scheduled for today.")


def create_sweep_scheduler(settings: Settings, medication_scheduler: MedicationScheduler) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=settings.TIMEZONE)
    scheduler.add_job(
        run_daily_sweep,
        'cron',
        hour=settings.DAILY_SWEEP_HOUR,
        minute=settings.DAILY_SWEEP_MINUTE,
        args=[medication_scheduler],
        id="daily_medication_sweep",
        replace_existing=True,
    )
    return scheduler
