from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from dashboard.api.schemas.bot import (
    BotConnectionResponse,
    BotStatusResponse,
    BotUser,
    OAuthEnvironment,
    QuarantinedUser,
    QuarantineListResponse,
)
from dashboard.application.services.auth_service import discord_api_exception
from dashboard.application.services.settings_service import validation_issues
from dashboard.core.config import DashboardSettings
from dashboard.core.errors import ApiException
from dashboard.domain.policies.redirects import is_snowflake
from dashboard.infrastructure.bot_api.client import BotApiClient, BotApiError
from dashboard.infrastructure.discord.oauth_client import (
    DiscordOAuthClient,
    DiscordOAuthError,
    DiscordUnauthorizedError,
)

logger = logging.getLogger(__name__)


def bot_token_missing() -> ApiException:
    return ApiException(
        status_code=500,
        error_code="BOT_TOKEN_MISSING",
        message="DISCORD_BOT_TOKEN is not configured",
    )


class BotService:
    """Bot health and quarantine management for one dashboard request."""

    def __init__(
        self,
        settings: DashboardSettings,
        discord: DiscordOAuthClient,
        bot_api: BotApiClient,
    ):
        self.settings = settings
        self.discord = discord
        self.bot_api = bot_api

    async def bot_status(self) -> BotStatusResponse:
        if not self.settings.DISCORD_BOT_TOKEN:
            raise bot_token_missing()
        try:
            payload = await self.discord.fetch_bot_user()
        except DiscordUnauthorizedError as exc:
            logger.error("Bot token rejected by Discord: %s", exc)
            raise ApiException(
                status_code=500,
                error_code="BOT_TOKEN_INVALID",
                message="DISCORD_BOT_TOKEN was rejected by Discord",
            ) from exc
        except DiscordOAuthError as exc:
            logger.error("Failed to fetch bot user: %s", exc)
            raise discord_api_exception(exc) from exc

        try:
            guild_count = len(await self.discord.fetch_bot_guild_ids())
        except DiscordOAuthError as exc:
            logger.warning("Bot guild count unavailable: %s", exc)
            guild_count = 0

        settings = self.settings
        return BotStatusResponse(
            configured=True,
            bot=BotUser.model_validate(payload),
            guilds=guild_count,
            environment=OAuthEnvironment(
                has_client_id=bool(settings.DISCORD_CLIENT_ID),
                has_client_secret=bool(settings.DISCORD_CLIENT_SECRET),
                has_redirect_uri=bool(settings.DISCORD_REDIRECT_URI),
                bot_api_configured=settings.bot_api_configured,
                node_env=settings.NODE_ENV,
            ),
        )

    async def guild_connection(self, guild_id: str) -> BotConnectionResponse:
        if self.bot_api.configured:
            try:
                payload = await self.bot_api.get_connection(guild_id)
                return BotConnectionResponse.model_validate(
                    {**payload, "guild_id": guild_id, "source": "bot_api"}
                )
            except (BotApiError, ValidationError) as exc:
                logger.warning(
                    "Bot API connection status unavailable guild_id=%s: %s",
                    guild_id,
                    exc,
                )

        if not self.settings.DISCORD_BOT_TOKEN:
            raise bot_token_missing()
        try:
            member = await self.discord.fetch_bot_member(guild_id)
        except DiscordUnauthorizedError:
            logger.info("Bot is not a member of guild_id=%s", guild_id)
            return BotConnectionResponse(
                guild_id=guild_id,
                source="discord",
                is_connected=False,
                connection_health="offline",
            )
        except DiscordOAuthError as exc:
            logger.error("Failed to check bot membership guild_id=%s: %s", guild_id, exc)
            raise discord_api_exception(exc) from exc

        permissions = member.get("permissions")
        user = member.get("user")
        return BotConnectionResponse(
            guild_id=guild_id,
            source="discord",
            is_connected=True,
            connection_health="healthy",
            last_seen=datetime.now(timezone.utc),
            permissions=[str(permissions)] if permissions else [],
            bot_user=BotUser.model_validate(user) if isinstance(user, dict) else None,
        )

    async def list_quarantine(self, guild_id: str) -> QuarantineListResponse:
        try:
            entries = await self.bot_api.list_quarantine(guild_id)
            users = [QuarantinedUser.model_validate(entry) for entry in entries]
        except BotApiError as exc:
            logger.error("Failed to list quarantine guild_id=%s: %s", guild_id, exc)
            raise ApiException(
                status_code=502,
                error_code="BOT_API_UNAVAILABLE",
                message="Failed to load quarantined users",
            ) from exc
        except ValidationError as exc:
            logger.error(
                "Bot API returned invalid quarantine entries guild_id=%s errors=%s",
                guild_id,
                exc.error_count(),
            )
            raise ApiException(
                status_code=502,
                error_code="BOT_API_UNAVAILABLE",
                message="Quarantined users could not be read",
                details={"issues": validation_issues(exc)},
            ) from exc
        return QuarantineListResponse(guild_id=guild_id, total=len(users), users=users)

    async def release_quarantine(self, guild_id: str, user_id: str) -> dict[str, Any]:
        if not is_snowflake(user_id):
            raise ApiException(
                status_code=400,
                error_code="INVALID_USER_ID",
                message="User ID must be a Discord snowflake",
                details={"user_id": user_id},
            )
        try:
            details = await self.bot_api.release_quarantine(guild_id, user_id)
        except BotApiError as exc:
            if exc.status_code == 404:
                raise ApiException(
                    status_code=404,
                    error_code="USER_NOT_QUARANTINED",
                    message="User is not quarantined in this guild",
                    details={"user_id": user_id},
                ) from exc
            logger.error(
                "Quarantine release failed guild_id=%s user_id=%s: %s",
                guild_id,
                user_id,
                exc,
            )
            raise ApiException(
                status_code=502,
                error_code="BOT_API_UNAVAILABLE",
                message="Failed to release user from quarantine",
            ) from exc
        logger.info("Released user_id=%s from quarantine guild_id=%s", user_id, guild_id)
        return {
            "ok": True,
            "message": "User has been released from quarantine",
            "guild_id": guild_id,
            "action": "security/quarantine/release",
            "details": {"user_id": user_id, **details},
        }

