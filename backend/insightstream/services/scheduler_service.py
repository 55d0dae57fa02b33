"""APScheduler service for the daily analytics refresh."""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.triggers.cron import CronTrigger
from datetime import datetime
from typing import Dict, Any, Optional
import logging

from insightstream.config import settings
from insightstream.database import SessionLocal
from insightstream.models.platform_schemas import RefreshSummary
from insightstream.services.error_tracking import capture_exception, capture_message
from insightstream.services.refresh_service import run_daily_refresh

logger = logging.getLogger(__name__)

DAILY_REFRESH_JOB_ID = "daily_data_refresh"

# Global scheduler instance
scheduler: BackgroundScheduler = None

# Outcome of the most recent run in this process
last_summary: Optional[RefreshSummary] = None


def get_scheduler() -> BackgroundScheduler:
    """Get the global scheduler instance."""
    return scheduler


def daily_refresh_job():
    """Background job that refreshes analytics for all users."""
    global last_summary

    db = SessionLocal()
    try:
        last_summary = run_daily_refresh(db)
        if last_summary.errors:
            capture_message(
                f"Daily refresh finished with {len(last_summary.errors)} error(s)",
                tags={"job": DAILY_REFRESH_JOB_ID}
            )
    except Exception as e:
        logger.exception(f"Error in daily refresh job: {e}")
        capture_exception(e, tags={"job": DAILY_REFRESH_JOB_ID})
    finally:
        db.close()


def start_scheduler():
    """Initialize and start the APScheduler with the daily refresh job."""
    global scheduler

    if scheduler is not None:
        logger.info("Scheduler already running")
        return

    jobstores = {
        'default': SQLAlchemyJobStore(url=settings.DATABASE_URL)
    }

    executors = {
        'default': ThreadPoolExecutor(settings.SCHEDULER_EXECUTORS_DEFAULT_MAX_WORKERS)
    }

    job_defaults = {
        'coalesce': True,
        'max_instances': 1
    }

    scheduler = BackgroundScheduler(
        jobstores=jobstores,
        executors=executors,
        job_defaults=job_defaults,
        timezone=settings.DAILY_REFRESH_TIMEZONE
    )

    scheduler.add_job(
        func=daily_refresh_job,
        trigger=CronTrigger(
            hour=settings.DAILY_REFRESH_HOUR,
            minute=settings.DAILY_REFRESH_MINUTE,
            timezone=settings.DAILY_REFRESH_TIMEZONE
        ),
        id=DAILY_REFRESH_JOB_ID,
        replace_existing=True
    )

    scheduler.start()
    logger.info(
        f"APScheduler started; daily refresh at "
        f"{settings.DAILY_REFRESH_HOUR:02d}:{settings.DAILY_REFRESH_MINUTE:02d} {settings.DAILY_REFRESH_TIMEZONE}"
    )


def shutdown_scheduler():
    """Shutdown the APScheduler."""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown()
        scheduler = None
        logger.info("APScheduler shut down")


def get_job_status() -> Dict[str, Any]:
    """
    Get status of the daily refresh job.

    Returns:
        Job status dictionary
    """
    status: Dict[str, Any] = {
        "last_run": last_summary.model_dump(mode="json") if last_summary else None
    }

    if scheduler is None:
        status.update({"exists": False, "error": "Scheduler not running"})
        return status

    job = scheduler.get_job(DAILY_REFRESH_JOB_ID)
    if not job:
        status["exists"] = False
        return status

    status.update({
        "exists": True,
        "job_id": job.id,
        "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
        "trigger": str(job.trigger)
    })
    return status


def trigger_now() -> bool:
    """
    Queue an immediate run of the daily refresh job.

    Returns:
        True if queued, False if the scheduler is not running
    """
    if scheduler is None:
        return False

    scheduler.add_job(
        func=daily_refresh_job,
        trigger='date',
        run_date=datetime.now(scheduler.timezone),
        id=f"{DAILY_REFRESH_JOB_ID}_manual",
        replace_existing=True
    )
    logger.info("Queued manual daily refresh run")
    return True
