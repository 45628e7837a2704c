"""Application services."""

from dashboard.application.services.auth_service import AuthService
from dashboard.application.services.bot_service import BotService
from dashboard.application.services.guild_service import GuildService
from dashboard.application.services.settings_service import SettingsService

__all__ = ["AuthService", "BotService", "GuildService", "SettingsService"]
