"""Security headers and audit logging."""

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable
import logging

logger = logging.getLogger("insightstream.audit")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        # Responses that may carry tokens or key material
        if any(path in request.url.path for path in ["/api/auth", "/api/api-keys"]):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, private"
            response.headers["Pragma"] = "no-cache"

        return response


class AuditLogMiddleware(BaseHTTPMiddleware):
    """
    Log security-relevant requests for an audit trail.

    Covers every auth request and state-changing admin operations.
    """

    def __init__(self, app):
        super().__init__(app)
        self.sensitive_paths = [
            "/api/auth",
            "/api/users",
            "/api/api-keys",
            "/api/jobs",
        ]

    def _should_log(self, path: str, method: str) -> bool:
        if "/api/auth" in path:
            return True

        if method in ["POST", "PUT", "PATCH", "DELETE"]:
            return any(sensitive in path for sensitive in self.sensitive_paths)

        return False

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self._should_log(request.url.path, request.method):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        response = await call_next(request)

        logger.info(
            f"AUDIT {request.method} {request.url.path} -> {response.status_code}",
            extra={"client_ip": client_ip, "status_code": response.status_code}
        )
        return response
