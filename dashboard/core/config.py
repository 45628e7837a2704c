from functools import lru_cache
from pathlib import Path
from typing import Final

from pydantic_settings import BaseSettings, SettingsConfigDict

SESSION_COOKIE_NAME: Final[str] = "__SessionLuny"
SESSION_MAX_AGE_SECONDS: Final[int] = 5 * 60 * 60

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_ROOT_ENV_FILE = _PROJECT_ROOT / ".env"


class DashboardSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ROOT_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # FastAPI app
    DASHBOARD_APP_NAME: str = "Aegis Dashboard"
    DASHBOARD_APP_VERSION: str = "0.1.0"
    NODE_ENV: str = "production"
    DASHBOARD_LOG_LEVEL: str = "INFO"
    DASHBOARD_LOG_FORMAT: str = "text"
    DASHBOARD_ENABLE_ACCESS_LOG: bool = True
    DASHBOARD_CORS_ENABLED: bool = False
    DASHBOARD_CORS_ALLOW_ORIGINS: str = "http://127.0.0.1:3000,http://localhost:3000"
    DASHBOARD_CORS_ALLOW_CREDENTIALS: bool = True
    DASHBOARD_CORS_ALLOW_METHODS: str = "GET,POST,PUT,DELETE,OPTIONS"
    DASHBOARD_CORS_ALLOW_HEADERS: str = "Content-Type,Accept,Origin,X-Requested-With"
    DASHBOARD_CORS_EXPOSE_HEADERS: str = "X-Request-ID"
    DASHBOARD_CORS_MAX_AGE_SECONDS: int = 600

    # Discord OAuth / REST
    DISCORD_CLIENT_ID: str = ""
    DISCORD_CLIENT_SECRET: str = ""
    DISCORD_REDIRECT_URI: str = "http://localhost:3000/api/auth/callback"
    DISCORD_BOT_TOKEN: str = ""
    DISCORD_API_BASE_URL: str = "https://discord.com/api/v10"
    DISCORD_AUTHORIZE_URL: str = "https://discord.com/api/oauth2/authorize"
    DISCORD_TOKEN_URL: str = "https://discordapp.com/api/oauth2/token"
    DISCORD_CDN_URL: str = "https://cdn.discordapp.com"
    DISCORD_OAUTH_SCOPES: str = "identify guilds"
    DISCORD_OAUTH_PROMPT: str = "none"
    DISCORD_HTTP_TIMEOUT_SECONDS: float = 15.0

    # Session cookie
    DASHBOARD_SESSION_COOKIE_NAME: str = SESSION_COOKIE_NAME
    DASHBOARD_SESSION_MAX_AGE_SECONDS: int = SESSION_MAX_AGE_SECONDS
    DASHBOARD_SESSION_COOKIE_SAMESITE: str = "lax"
    DASHBOARD_CLEAR_STALE_SESSION: bool = True

    # Redirect targets
    DASHBOARD_LOGIN_PATH: str = "/api/auth/login"
    DASHBOARD_DEFAULT_REDIRECT_PATH: str = "/dashboard/@me"
    DASHBOARD_ERROR_REDIRECT_PATH: str = "/login"
    DASHBOARD_GUILDS_PATH: str = "/dashboard"

    # Bot settings API
    DASHBOARD_API_URL: str = ""
    DASHBOARD_API_KEY: str = ""
    DASHBOARD_API_TIMEOUT_SECONDS: float = 10.0

    @property
    def session_cookie_secure(self) -> bool:
        # Only plain development is served over http.
        return self.NODE_ENV.strip().lower() != "development"

    @property
    def session_cookie_samesite(self) -> str:
        normalized = self.DASHBOARD_SESSION_COOKIE_SAMESITE.strip().lower()
        if normalized not in {"lax", "strict", "none"}:
            return "lax"
        if normalized == "none" and not self.session_cookie_secure:
            return "lax"
        return normalized

    @property
    def oauth_scope_list(self) -> list[str]:
        return [scope.strip() for scope in self.DISCORD_OAUTH_SCOPES.split() if scope.strip()]

    @property
    def oauth_prompt(self) -> str | None:
        cleaned = self.DISCORD_OAUTH_PROMPT.strip()
        return cleaned or None

    @property
    def oauth_configured(self) -> bool:
        return bool(
            self.DISCORD_CLIENT_ID
            and self.DISCORD_CLIENT_SECRET
            and self.DISCORD_REDIRECT_URI
        )

    @property
    def bot_api_configured(self) -> bool:
        return bool(self.DASHBOARD_API_URL.strip())

    @property
    def cors_allow_origins(self) -> list[str]:
        return self._split_csv(self.DASHBOARD_CORS_ALLOW_ORIGINS)

    @property
    def cors_allow_methods(self) -> list[str]:
        return self._split_csv(self.DASHBOARD_CORS_ALLOW_METHODS)

    @property
    def cors_allow_headers(self) -> list[str]:
        return self._split_csv(self.DASHBOARD_CORS_ALLOW_HEADERS)

    @property
    def cors_expose_headers(self) -> list[str]:
        return self._split_csv(self.DASHBOARD_CORS_EXPOSE_HEADERS)

    @staticmethod
    def _split_csv(raw: str) -> list[str]:
        return [item.strip() for item in raw.split(",") if item.strip()]


@lru_cache
def get_settings() -> DashboardSettings:
    return DashboardSettings()
