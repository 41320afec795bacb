"""
Background scheduler - optional daily expiration sweep inside the API process.

The engine does not schedule anything by itself; this job is just one more
caller of SubscriptionLifecycle.sweep_expirations, enabled with
SCHEDULER_ENABLED=true.
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from coaching.config import get_settings

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(daemon=True)


def _run_expiration_sweep():
    from coaching.infrastructure.db.session import get_session_factory
    from coaching.application.subscriptions import SubscriptionLifecycle

    Session = get_session_factory()
    db = Session()
    try:
        SubscriptionLifecycle(db).sweep_expirations()
    except Exception:
        logger.exception("Expiration sweep job failed")
    finally:
        db.close()


def start_scheduler():
    """Start the background scheduler with the daily sweep job."""
    settings = get_settings()
    scheduler.add_job(
        _run_expiration_sweep,
        CronTrigger(
            hour=settings.EXPIRATION_SWEEP_HOUR,
            minute=settings.EXPIRATION_SWEEP_MINUTE,
            timezone=settings.TIMEZONE,
        ),
        id="expiration_sweep",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler started: expiration_sweep (%02d:%02d %s)",
        settings.EXPIRATION_SWEEP_HOUR, settings.EXPIRATION_SWEEP_MINUTE, settings.TIMEZONE,
    )


def shutdown_scheduler():
    """Gracefully stop the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
