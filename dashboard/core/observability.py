from __future__ import annotations

import logging
from time import perf_counter

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from dashboard.core.config import DashboardSettings, get_settings

logger = logging.getLogger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One log line per request; 5xx responses are logged at WARNING."""

    def __init__(self, app, settings: DashboardSettings | None = None):
        super().__init__(app)
        self.settings = settings or get_settings()

    async def dispatch(self, request: Request, call_next):
        if not self.settings.DASHBOARD_ENABLE_ACCESS_LOG:
            return await call_next(request)

        started = perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = max(0.0, perf_counter() - started) * 1000.0
            # Path only; query strings carry OAuth codes and state.
            logger.log(
                logging.WARNING if status_code >= 500 else logging.INFO,
                "http_request method=%s path=%s route=%s status=%s duration_ms=%.2f "
                "session=%s ip=%s",
                request.method,
                request.url.path,
                route_template(request),
                status_code,
                elapsed_ms,
                "yes" if self.settings.DASHBOARD_SESSION_COOKIE_NAME in request.cookies else "no",
                client_address(request),
            )


def route_template(request: Request) -> str:
    path = getattr(request.scope.get("route"), "path", None)
    return path if isinstance(path, str) and path else "unmatched"


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
    if forwarded:
        return forwarded
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
