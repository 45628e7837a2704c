from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from dashboard.api.schemas.common import HealthResponse
from dashboard.core.config import DashboardSettings, get_settings

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(settings: DashboardSettings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        service=settings.DASHBOARD_APP_NAME,
        environment=settings.NODE_ENV,
        version=settings.DASHBOARD_APP_VERSION,
        oauth_configured=settings.oauth_configured,
        bot_api_configured=settings.bot_api_configured,
        timestamp=datetime.now(timezone.utc),
    )
