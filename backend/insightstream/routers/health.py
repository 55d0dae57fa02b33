"""Liveness and readiness probes."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
from datetime import datetime

from insightstream import __version__
from insightstream.config import settings
from insightstream.database import get_db
from insightstream.models.api_key import (
    ApiKey,
    SERVICE_YOUTUBE,
    SERVICE_INSTAGRAM_SCRAPER,
    SERVICE_GOOGLE_ANALYTICS,
    SERVICE_GOOGLE_ANALYTICS_MP,
)

router = APIRouter()

KNOWN_SERVICES = (SERVICE_YOUTUBE, SERVICE_INSTAGRAM_SCRAPER, SERVICE_GOOGLE_ANALYTICS, SERVICE_GOOGLE_ANALYTICS_MP)


@router.get("/health")
async def health_check():
    """Liveness: the process is up."""
    return {
        "status": "healthy",
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/health/ready")
def readiness_check(db: Session = Depends(get_db)):
    """
    Readiness: the database answers and, when enabled, the scheduler runs.

    Which vendor keys are configured is reported for operators but does not
    affect readiness; features without a key degrade individually.
    """
    checks = {}
    errors = []

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = True
        configured = {name for (name,) in db.query(ApiKey.service_name).distinct()}
    except Exception as e:
        checks["database"] = False
        configured = set()
        errors.append(f"database: {e}")

    if settings.SCHEDULER_ENABLED:
        from insightstream.services.scheduler_service import get_scheduler
        running_scheduler = get_scheduler()
        checks["scheduler"] = bool(running_scheduler and running_scheduler.running)
        if not checks["scheduler"]:
            errors.append("scheduler: not running")

    body = {
        "status": "ready" if all(checks.values()) else "not_ready",
        "checks": checks,
        "api_keys": {service: service in configured for service in KNOWN_SERVICES},
        "chat_enabled": bool(settings.GEMINI_API_KEY),
        "timestamp": datetime.utcnow().isoformat(),
    }
    if errors:
        body["errors"] = errors
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
    return body
