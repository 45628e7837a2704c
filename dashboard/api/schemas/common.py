from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str
    version: str
    oauth_configured: bool
    bot_api_configured: bool
    timestamp: datetime
