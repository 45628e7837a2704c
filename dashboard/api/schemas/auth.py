from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SessionUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    discriminator: str | None = None
    global_name: str | None = None
    avatar: str | None = None
    avatar_url: str | None = None
    email: str | None = None
    verified: bool | None = None


class GuildSummaryResponse(BaseModel):
    id: str
    name: str
    icon: str | None = None
    owner: bool
    permissions: str
    bot_present: bool | None = None


class GuildCollection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    manageable: int
    items: list[GuildSummaryResponse] = Field(default_factory=list, alias="list")


class SessionInfo(BaseModel):
    token_preview: str
    expires_at: datetime


class AuthStatusResponse(BaseModel):
    authenticated: bool
    configured: bool
    user: SessionUserResponse | None = None
    guilds: GuildCollection | None = None
    session: SessionInfo | None = None
    error: str | None = None


class GuildListResponse(BaseModel):
    guilds: list[GuildSummaryResponse]
