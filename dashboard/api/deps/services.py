from fastapi import Depends

from dashboard.application.services.auth_service import AuthService
from dashboard.application.services.bot_service import BotService
from dashboard.application.services.guild_service import GuildService
from dashboard.application.services.settings_service import SettingsService
from dashboard.core.config import DashboardSettings, get_settings
from dashboard.infrastructure.bot_api.client import BotApiClient
from dashboard.infrastructure.discord.oauth_client import DiscordOAuthClient


def get_discord_client(
    settings: DashboardSettings = Depends(get_settings),
) -> DiscordOAuthClient:
    return DiscordOAuthClient(
        client_id=settings.DISCORD_CLIENT_ID,
        client_secret=settings.DISCORD_CLIENT_SECRET,
        redirect_uri=settings.DISCORD_REDIRECT_URI,
        scopes=settings.oauth_scope_list,
        bot_token=settings.DISCORD_BOT_TOKEN,
        api_base_url=settings.DISCORD_API_BASE_URL,
        authorize_url=settings.DISCORD_AUTHORIZE_URL,
        token_url=settings.DISCORD_TOKEN_URL,
        timeout_seconds=settings.DISCORD_HTTP_TIMEOUT_SECONDS,
    )


def get_bot_api_client(
    settings: DashboardSettings = Depends(get_settings),
) -> BotApiClient:
    return BotApiClient(
        base_url=settings.DASHBOARD_API_URL,
        api_key=settings.DASHBOARD_API_KEY,
        timeout_seconds=settings.DASHBOARD_API_TIMEOUT_SECONDS,
    )


def get_auth_service(
    settings: DashboardSettings = Depends(get_settings),
    discord: DiscordOAuthClient = Depends(get_discord_client),
) -> AuthService:
    return AuthService(settings, discord)


def get_guild_service(
    settings: DashboardSettings = Depends(get_settings),
    discord: DiscordOAuthClient = Depends(get_discord_client),
) -> GuildService:
    return GuildService(settings, discord)


def get_settings_service(
    bot_api: BotApiClient = Depends(get_bot_api_client),
) -> SettingsService:
    return SettingsService(bot_api)


def get_bot_service(
    settings: DashboardSettings = Depends(get_settings),
    discord: DiscordOAuthClient = Depends(get_discord_client),
    bot_api: BotApiClient = Depends(get_bot_api_client),
) -> BotService:
    return BotService(settings, discord, bot_api)
