"""
Error Tracking Service

Reports unexpected failures to Sentry when SENTRY_DSN is configured. Without
a DSN every call is a no-op, so services can report unconditionally.
"""

import logging
from typing import Optional, Dict, Any
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from insightstream import __version__
from insightstream.config import settings

logger = logging.getLogger(__name__)

# Request headers and query parameters that carry credentials
SECRET_HEADERS = {"authorization", "x-rapidapi-key", "cookie"}
SECRET_PARAMS = ("api_secret", "key", "token")
IGNORED_PATHS = ("/health", "/track/")


def _redact_request(request: Dict[str, Any]):
    headers = request.get("headers")
    if isinstance(headers, dict):
        for name in list(headers):
            if name.lower() in SECRET_HEADERS:
                headers[name] = "[redacted]"

    query = request.get("query_string")
    if isinstance(query, str) and any(f"{param}=" in query for param in SECRET_PARAMS):
        request["query_string"] = "[redacted]"


class ErrorTracker:
    """Thin wrapper over the Sentry SDK."""

    def __init__(self):
        self.sentry_enabled = False

    def init(self, dsn: Optional[str] = None):
        """Initialize Sentry once, if a DSN is available."""
        dsn = dsn if dsn is not None else settings.SENTRY_DSN
        if not dsn or self.sentry_enabled:
            return

        try:
            sentry_sdk.init(
                dsn=dsn,
                environment=settings.ENVIRONMENT,
                release=f"insightstream@{__version__}",
                traces_sample_rate=0.1,
                integrations=[FastApiIntegration(), SqlalchemyIntegration()],
                before_send=self._before_send,
                send_default_pii=False
            )
            self.sentry_enabled = True
            logger.info(f"Sentry enabled for environment {settings.ENVIRONMENT}")
        except Exception as e:
            logger.error(f"Sentry initialisation failed, continuing without it: {e}")

    @staticmethod
    def _before_send(event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Drop probe and redirect noise and strip credentials from request data."""
        request = event.get("request") or {}
        if any(path in (request.get("url") or "") for path in IGNORED_PATHS):
            return None

        exc_info = hint.get("exc_info")
        if exc_info and type(exc_info[1]).__name__ == "HTTPException":
            return None

        if request:
            _redact_request(request)
        return event

    def capture_exception(
        self,
        exception: Exception,
        context: Optional[Dict[str, Any]] = None,
        tags: Optional[Dict[str, str]] = None
    ):
        """
        Report an exception.

        Args:
            exception: The exception to report
            context: Extra data, e.g. {"user_id": ...}; scalars are wrapped
            tags: Searchable tags such as {"platform": "youtube"}
        """
        if not self.sentry_enabled:
            return

        with sentry_sdk.new_scope() as scope:
            for key, value in (context or {}).items():
                scope.set_context(key, value if isinstance(value, dict) else {"value": value})
            for key, value in (tags or {}).items():
                scope.set_tag(key, value)
            sentry_sdk.capture_exception(exception)

    def capture_message(self, message: str, level: str = "warning", tags: Optional[Dict[str, str]] = None):
        if not self.sentry_enabled:
            return

        with sentry_sdk.new_scope() as scope:
            for key, value in (tags or {}).items():
                scope.set_tag(key, value)
            sentry_sdk.capture_message(message, level=level)


error_tracker = ErrorTracker()


def capture_exception(exception: Exception, **kwargs):
    error_tracker.capture_exception(exception, **kwargs)


def capture_message(message: str, **kwargs):
    error_tracker.capture_message(message, **kwargs)
