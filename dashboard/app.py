import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard.api.router import api_router, page_router
from dashboard.core.config import get_settings
from dashboard.core.errors import register_exception_handlers
from dashboard.core.logging import configure_logging
from dashboard.core.observability import AccessLogMiddleware
from dashboard.core.request_context import RequestContextMiddleware

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """FastAPI app factory."""
    settings = get_settings()
    configure_logging(settings.DASHBOARD_LOG_LEVEL, settings.DASHBOARD_LOG_FORMAT)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.oauth_configured:
            logger.warning(
                "Discord OAuth is not fully configured; login will fail until "
                "DISCORD_CLIENT_ID, DISCORD_CLIENT_SECRET and DISCORD_REDIRECT_URI are set"
            )
        logger.info("Dashboard started environment=%s", settings.NODE_ENV)
        yield

    app = FastAPI(
        title=settings.DASHBOARD_APP_NAME,
        version=settings.DASHBOARD_APP_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(AccessLogMiddleware, settings=settings)
    app.add_middleware(RequestContextMiddleware)
    if settings.DASHBOARD_CORS_ENABLED:
        # Registered last so it wraps the full stack and can short-circuit preflight.
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=settings.DASHBOARD_CORS_ALLOW_CREDENTIALS,
            allow_methods=settings.cors_allow_methods,
            allow_headers=settings.cors_allow_headers,
            expose_headers=settings.cors_expose_headers,
            max_age=settings.DASHBOARD_CORS_MAX_AGE_SECONDS,
        )
    app.include_router(api_router, prefix="/api")
    app.include_router(page_router)
    register_exception_handlers(app)

    return app
