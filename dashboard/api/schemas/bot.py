from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class BotUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    username: str
    discriminator: str | None = None
    avatar: str | None = None
    verified: bool | None = None
    bot: bool | None = None


class OAuthEnvironment(BaseModel):
    has_client_id: bool
    has_client_secret: bool
    has_redirect_uri: bool
    bot_api_configured: bool
    node_env: str


class BotStatusResponse(BaseModel):
    configured: bool
    bot: BotUser
    guilds: int
    environment: OAuthEnvironment


class BotConnectionResponse(BaseModel):
    """Bot presence in one guild, as reported by the bot API or by Discord."""

    model_config = ConfigDict(extra="ignore")

    guild_id: str
    source: Literal["bot_api", "discord"]
    is_connected: bool = Field(validation_alias=AliasChoices("is_connected", "isConnected"))
    connection_health: Literal["healthy", "degraded", "offline"] = Field(
        default="healthy",
        validation_alias=AliasChoices("connection_health", "connectionHealth"),
    )
    last_seen: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("last_seen", "lastSeen"),
    )
    latency_ms: int | None = Field(
        default=None,
        validation_alias=AliasChoices("latency_ms", "latency"),
    )
    permissions: list[str] = Field(default_factory=list)
    bot_user: BotUser | None = Field(
        default=None,
        validation_alias=AliasChoices("bot_user", "botUser"),
    )


class QuarantinedUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str = Field(validation_alias=AliasChoices("user_id", "userId"))
    username: str | None = None
    discriminator: str | None = None
    quarantined_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("quarantined_at", "quarantinedAt"),
    )
    reason: str | None = None
    quarantined_by: str | None = Field(
        default=None,
        validation_alias=AliasChoices("quarantined_by", "quarantinedBy"),
    )
    severity: Literal["low", "medium", "high", "critical"] | None = None
    auto_release: bool = Field(
        default=False,
        validation_alias=AliasChoices("auto_release", "autoRelease"),
    )
    release_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("release_at", "releaseAt"),
    )
    evidence: list[str] = Field(default_factory=list)


class QuarantineListResponse(BaseModel):
    guild_id: str
    total: int
    users: list[QuarantinedUser]
