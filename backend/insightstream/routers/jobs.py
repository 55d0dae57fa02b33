"""Admin endpoints for the daily refresh job."""

from fastapi import APIRouter, BackgroundTasks, Depends

from insightstream.models.user import User
from insightstream.middleware.auth import get_current_admin
from insightstream.services import scheduler_service

router = APIRouter()


@router.get("/daily-refresh")
def daily_refresh_status(admin: User = Depends(get_current_admin)):
    """Next scheduled run and the outcome of the last run."""
    return scheduler_service.get_job_status()


@router.post("/daily-refresh/run", status_code=202)
def run_daily_refresh(
    background_tasks: BackgroundTasks,
    admin: User = Depends(get_current_admin)
):
    """
    Start a refresh now.

    Uses the scheduler when it is running, otherwise a background task.
    """
    if scheduler_service.trigger_now():
        return {"queued": True, "via": "scheduler"}

    background_tasks.add_task(scheduler_service.daily_refresh_job)
    return {"queued": True, "via": "background_task"}
