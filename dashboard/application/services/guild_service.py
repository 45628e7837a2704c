from __future__ import annotations

import logging
from typing import Any

from dashboard.application.dto.auth import GuildSummary
from dashboard.application.services.auth_service import (
    discord_api_exception,
    to_guild_summary,
)
from dashboard.core.config import DashboardSettings
from dashboard.core.errors import ApiException
from dashboard.domain.policies.guild_permissions import filter_manageable_guilds
from dashboard.infrastructure.discord.oauth_client import (
    DiscordOAuthClient,
    DiscordOAuthError,
    DiscordRateLimitedError,
    DiscordUnauthorizedError,
)

logger = logging.getLogger(__name__)


class GuildService:
    def __init__(self, settings: DashboardSettings, discord: DiscordOAuthClient):
        self.settings = settings
        self.discord = discord

    async def fetch_guilds(self, token: str) -> list[GuildSummary]:
        payload = await self.discord.fetch_user_guilds(token)
        return [to_guild_summary(guild) for guild in payload if isinstance(guild, dict)]

    async def fetch_manageable_guilds(self, token: str) -> list[GuildSummary]:
        return filter_manageable_guilds(await self.fetch_guilds(token))

    async def list_guilds(self, token: str) -> list[GuildSummary]:
        try:
            return await self.fetch_guilds(token)
        except DiscordOAuthError as exc:
            logger.error("Failed to fetch user guilds: %s", exc)
            raise discord_api_exception(exc) from exc

    async def list_manageable_guilds(self, token: str) -> list[dict[str, Any]]:
        guilds = filter_manageable_guilds(await self.list_guilds(token))
        bot_guild_ids = await self._bot_guild_ids()
        return [
            {
                "id": guild.id,
                "name": guild.name,
                "icon": guild.icon,
                "owner": guild.owner,
                "permissions": str(guild.permissions),
                "bot_present": guild.id in bot_guild_ids,
            }
            for guild in guilds
        ]

    async def get_manageable_guild(self, token: str, guild_id: str) -> GuildSummary:
        guilds = filter_manageable_guilds(await self.list_guilds(token))
        for guild in guilds:
            if guild.id == guild_id:
                return guild
        raise ApiException(
            status_code=403,
            error_code="GUILD_ACCESS_DENIED",
            message="You do not have permission to manage this guild",
            details={"guild_id": guild_id},
        )

    async def list_channels(self, guild_id: str) -> list[dict[str, Any]]:
        try:
            return await self.discord.fetch_guild_channels(guild_id)
        except DiscordOAuthError as exc:
            raise self._bot_failure(exc, resource="channels", guild_id=guild_id) from exc

    async def list_roles(self, guild_id: str) -> list[dict[str, Any]]:
        try:
            return await self.discord.fetch_guild_roles(guild_id)
        except DiscordOAuthError as exc:
            raise self._bot_failure(exc, resource="roles", guild_id=guild_id) from exc

    async def _bot_guild_ids(self) -> set[str]:
        if not self.settings.DISCORD_BOT_TOKEN:
            return set()
        try:
            return await self.discord.fetch_bot_guild_ids()
        except DiscordOAuthError as exc:
            logger.warning("Bot guild presence unavailable: %s", exc)
            return set()

    def _bot_failure(
        self,
        exc: DiscordOAuthError,
        *,
        resource: str,
        guild_id: str,
    ) -> ApiException:
        logger.error("Failed to fetch guild %s guild_id=%s: %s", resource, guild_id, exc)
        if isinstance(exc, DiscordRateLimitedError):
            return discord_api_exception(exc)
        if isinstance(exc, DiscordUnauthorizedError):
            return ApiException(
                status_code=404,
                error_code="BOT_NOT_IN_GUILD",
                message="The bot cannot access this guild",
                details={"guild_id": guild_id},
            )
        if not self.settings.DISCORD_BOT_TOKEN:
            return ApiException(
                status_code=500,
                error_code="BOT_TOKEN_MISSING",
                message="DISCORD_BOT_TOKEN is not configured",
            )
        return discord_api_exception(exc)
