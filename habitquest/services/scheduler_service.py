"""
Background scheduler.
Handles:
- Materializing each day's challenge set right after midnight (reference zone)
- Catching up on startup if today's set is missing
"""

import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from habitquest.database import SessionLocal
from habitquest.services.date_service import DateService
from habitquest.services.challenge_service import ChallengeService
from habitquest.constants import REFERENCE_TIMEZONE

logger = logging.getLogger("habitquest.scheduler")

scheduler = AsyncIOScheduler(timezone=REFERENCE_TIMEZONE)


def create_daily_challenges() -> int:
    """Make sure today's challenges exist. Returns how many are live"""
    db = SessionLocal()
    try:
        today = DateService().get_today()
        challenges = ChallengeService(db).ensure_today_challenges(today)
        logger.info(f"{len(challenges)} challenges live for {today}")
        return len(challenges)
    finally:
        db.close()


async def run_daily_challenges():
    """Job: daily challenge sweep"""
    try:
        create_daily_challenges()
    except Exception as e:
        logger.error(f"Scheduler Error (Daily challenges): {e}")


def start_scheduler():
    """Start the scheduler"""
    if not scheduler.running:
        scheduler.add_job(
            run_daily_challenges,
            CronTrigger(hour=0, minute=0, second=5, timezone=REFERENCE_TIMEZONE),
            id='daily_challenges',
            replace_existing=True
        )
        # Catch up immediately in case the process was down at midnight
        scheduler.add_job(run_daily_challenges, id='daily_challenges_startup')

        scheduler.start()
        logger.info(">>> APScheduler STARTED <<<")
        logger.info(f"Scheduled jobs: {[job.id for job in scheduler.get_jobs()]}")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler stopped")
