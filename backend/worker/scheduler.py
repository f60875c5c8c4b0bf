import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from app.config import get_settings

logger = logging.getLogger(__name__)

scheduler: BackgroundScheduler | None = None


def dispatch_outbox():
    """Drain pending outbox events into the search index and the task queue."""
    from app.dependencies import get_outbox_dispatcher

    try:
        dispatched = get_outbox_dispatcher().dispatch_pending()
        if dispatched:
            logger.info(f"Outbox run dispatched {dispatched} events")
    except Exception as e:
        logger.error(f"Outbox run failed: {e}")


def purge_outbox() -> int:
    """Delete dispatched outbox events older than the retention window.

    Returns the number of events deleted.
    """
    from app.database import SessionLocal
    from app.services.outbox import purge_dispatched_events

    retention_days = get_settings().outbox_retention_days
    db = SessionLocal()
    delete_count = 0
    try:
        delete_count = purge_dispatched_events(db, retention_days)
        db.commit()
        logger.info(f"Purged {delete_count} outbox events dispatched over {retention_days} days ago")
    except Exception as e:
        logger.error(f"Outbox purge failed: {e}")
        db.rollback()
    finally:
        db.close()

    return delete_count


def start_scheduler():
    """Start the background scheduler."""
    global scheduler
    settings = get_settings()

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        dispatch_outbox,
        IntervalTrigger(seconds=settings.outbox_dispatch_interval_seconds),
        id="outbox_dispatch",
        name="Dispatch outbox events",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        purge_outbox,
        CronTrigger(hour=3, minute=0),
        id="outbox_purge",
        name="Purge dispatched outbox events",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started - outbox dispatch every {settings.outbox_dispatch_interval_seconds}s, purge daily at 03:00"
    )


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    global scheduler
    if scheduler:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Scheduler shut down")
