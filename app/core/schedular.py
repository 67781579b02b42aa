import logging
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.core.config import settings
from app.core.database import SessionLocal
from app.services.rate_limit import RateLimitService

logger = logging.getLogger(__name__)


def cleanup_expired_rate_limits():
    """
    Scheduled task to prune the cooldown ledger.
    Deletes engagement and view records older than the retention window.
    Runs at the top of every hour.
    """
    db = SessionLocal()
    try:
        retention = timedelta(hours=settings.rate_limit_retention_hours)
        deleted_count = RateLimitService(db).cleanup_expired(retention)
        logger.info(
            f"[{datetime.now(timezone.utc)}] Rate limit cleanup completed. "
            f"Deleted {deleted_count} expired records."
        )
    except Exception as e:
        db.rollback()
        logger.error(f"Error during rate limit cleanup: {e}")
    finally:
        db.close()


def start_scheduler():
    """
    Initialize and start the APScheduler for ledger cleanup.
    """
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        cleanup_expired_rate_limits,
        trigger=CronTrigger(minute=0),
        id="rate_limit_cleanup",
        name="Clean up expired rate limit records",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Rate limit scheduler started. Hourly cleanup scheduled.")

    return scheduler


def shutdown_scheduler(scheduler: AsyncIOScheduler):
    """
    Gracefully shutdown the scheduler.
    """
    if scheduler:
        scheduler.shutdown()
        logger.info("Rate limit scheduler shut down.")
