"""
APScheduler for periodic jobs
- Item expiry sweep (AVAILABLE -> EXPIRED once expiry_date has passed)
"""
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def setup_jobs():
    """Register every periodic job"""
    from app.services.expiry_service import expire_overdue_items

    scheduler.add_job(
        expire_overdue_items,
        trigger=IntervalTrigger(minutes=settings.ITEM_EXPIRY_CHECK_MINUTES),
        id="item_expiry_sweep",
        name="Expire overdue items",
        replace_existing=True,
    )

    logger.info("[Scheduler] Jobs configured (1 job)")


def start_scheduler():
    """Start the scheduler when the app boots"""
    if not scheduler.running:
        setup_jobs()
        scheduler.start()
        logger.info("[Scheduler] Started")


def stop_scheduler():
    """Stop the scheduler on shutdown"""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("[Scheduler] Stopped")
