"""FastAPI main application."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from insightstream import __version__
from insightstream.config import settings
from insightstream.database import init_db
from insightstream.routers import auth, users, api_keys, youtube, instagram, ai, campaigns, jobs, tracking, health
from insightstream.middleware.security_middleware import SecurityHeadersMiddleware, AuditLogMiddleware
from insightstream.services.error_tracking import error_tracker, capture_exception
from insightstream.services.logging_service import configure_logging

logger = logging.getLogger(__name__)

app = FastAPI(
    title="InsightStream API",
    description="Social media analytics for assigned YouTube videos and Instagram reels",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AuditLogMiddleware)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    capture_exception(exc, context={"request": {"method": request.method, "path": request.url.path}})
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    configure_logging()
    error_tracker.init()
    init_db()

    if settings.SCHEDULER_ENABLED:
        from insightstream.services.scheduler_service import start_scheduler
        start_scheduler()

    logger.info(
        f"InsightStream API started (environment: {settings.ENVIRONMENT}, "
        f"scheduler: {'on' if settings.SCHEDULER_ENABLED else 'off'})"
    )


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on application shutdown."""
    if settings.SCHEDULER_ENABLED:
        from insightstream.services.scheduler_service import shutdown_scheduler
        shutdown_scheduler()

    logger.info("InsightStream API shutting down")


@app.get("/")
async def root():
    return {
        "message": "InsightStream API",
        "version": __version__,
        "status": "operational",
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs"
    }


app.include_router(health.router, tags=["Health"])
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(api_keys.router, prefix="/api/api-keys", tags=["API Keys"])
app.include_router(youtube.router, prefix="/api/youtube", tags=["YouTube"])
app.include_router(instagram.router, prefix="/api/instagram", tags=["Instagram"])
app.include_router(ai.router, prefix="/api/ai", tags=["AI"])
app.include_router(campaigns.router, prefix="/api/campaigns", tags=["Campaigns"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["Jobs"])
app.include_router(tracking.router, prefix="/track", tags=["Tracking"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "insightstream.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
