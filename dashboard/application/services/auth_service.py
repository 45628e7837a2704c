from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urlencode

from dashboard.application.dto.auth import (
    CallbackOutcome,
    GuildSummary,
    SessionCheck,
    SessionState,
    SessionUser,
)
from dashboard.core.config import DashboardSettings
from dashboard.core.errors import ApiException
from dashboard.domain.policies.guild_permissions import (
    filter_manageable_guilds,
    parse_permissions,
)
from dashboard.domain.policies.redirects import (
    bounded_state,
    guild_dashboard_path,
    is_snowflake,
    safe_redirect_target,
)
from dashboard.infrastructure.discord.oauth_client import (
    DiscordNoAccessTokenError,
    DiscordOAuthClient,
    DiscordOAuthError,
    DiscordRateLimitedError,
    DiscordUnauthorizedError,
)

logger = logging.getLogger(__name__)


def discord_api_exception(exc: DiscordOAuthError) -> ApiException:
    """Map an upstream Discord failure onto the JSON error taxonomy."""
    if isinstance(exc, DiscordRateLimitedError):
        headers = None
        details = None
        if exc.retry_after is not None:
            headers = {"Retry-After": str(max(1, int(exc.retry_after + 0.999)))}
            details = {"retry_after": exc.retry_after}
        return ApiException(
            status_code=429,
            error_code="DISCORD_RATE_LIMITED",
            message="Discord is rate limiting requests, try again shortly",
            details=details,
            headers=headers,
        )
    return ApiException(
        status_code=500,
        error_code="DISCORD_UNAVAILABLE",
        message="Discord API request failed",
    )


def to_session_user(payload: dict[str, Any], *, cdn_url: str) -> SessionUser:
    user_id = str(payload["id"])
    avatar = payload.get("avatar")
    avatar_url = None
    if avatar:
        extension = "gif" if str(avatar).startswith("a_") else "png"
        avatar_url = f"{cdn_url.rstrip('/')}/avatars/{user_id}/{avatar}.{extension}"
    return SessionUser(
        id=user_id,
        username=str(payload.get("username") or "unknown"),
        discriminator=payload.get("discriminator"),
        global_name=payload.get("global_name"),
        avatar=avatar,
        avatar_url=avatar_url,
        email=payload.get("email"),
        verified=payload.get("verified"),
        locale=payload.get("locale"),
        mfa_enabled=payload.get("mfa_enabled"),
    )


def to_guild_summary(payload: dict[str, Any]) -> GuildSummary:
    return GuildSummary(
        id=str(payload.get("id")),
        name=str(payload.get("name") or ""),
        icon=payload.get("icon"),
        owner=payload.get("owner") is True,
        permissions=parse_permissions(payload.get("permissions")),
    )


class AuthService:
    def __init__(self, settings: DashboardSettings, discord: DiscordOAuthClient):
        self.settings = settings
        self.discord = discord

    def ensure_oauth_config(self) -> None:
        if not self.settings.DISCORD_CLIENT_ID or not self.settings.DISCORD_REDIRECT_URI:
            raise ApiException(
                status_code=500,
                error_code="OAUTH_CONFIG_MISSING",
                message="Discord OAuth credentials are not configured",
            )

    def build_login_url(self, state: str | None) -> str:
        self.ensure_oauth_config()
        return self.discord.build_authorize_url(
            state=bounded_state(state),
            prompt=self.settings.oauth_prompt,
        )

    def post_login_target(self, state: str | None) -> str:
        return safe_redirect_target(
            state,
            default=self.settings.DASHBOARD_DEFAULT_REDIRECT_PATH,
        )

    def error_redirect(self, error_code: str) -> str:
        query = urlencode({"error": error_code})
        return f"{self.settings.DASHBOARD_ERROR_REDIRECT_PATH}?{query}"

    async def verify_session(self, token: str | None) -> SessionCheck:
        """Resolve a session cookie to a Discord user.

        Rate limits and transport failures propagate as ``DiscordOAuthError``
        subclasses; only a rejected token yields ``VERIFICATION_FAILED``.
        """
        if not token:
            return SessionCheck(state=SessionState.NO_TOKEN)
        try:
            payload = await self.discord.fetch_user(token)
        except DiscordUnauthorizedError as exc:
            logger.info("Session token rejected by Discord: %s", exc)
            return SessionCheck(state=SessionState.VERIFICATION_FAILED, token=token)
        return SessionCheck(
            state=SessionState.VERIFIED,
            token=token,
            user=to_session_user(payload, cdn_url=self.settings.DISCORD_CDN_URL),
        )

    async def complete_callback(
        self,
        *,
        code: str | None,
        error: str | None,
        guild_id: str | None,
        state: str | None,
    ) -> CallbackOutcome:
        if error == "access_denied":
            return CallbackOutcome(redirect_url="/", error_code="access_denied")
        if error:
            logger.warning("Discord OAuth callback returned error=%s", error)
            return CallbackOutcome(redirect_url=self.error_redirect(error), error_code=error)
        if not code:
            logger.warning("Discord OAuth callback invoked without code")
            return CallbackOutcome(
                redirect_url=self.error_redirect("missing_code"),
                error_code="missing_code",
            )

        try:
            token_payload = await self.discord.exchange_code(code)
        except DiscordNoAccessTokenError as exc:
            logger.warning("Discord token exchange failed: %s", exc)
            return CallbackOutcome(
                redirect_url=self.error_redirect("token_exchange_failed"),
                error_code="token_exchange_failed",
            )
        except DiscordRateLimitedError as exc:
            logger.warning("Discord token exchange rate limited: %s", exc)
            return CallbackOutcome(
                redirect_url=self.error_redirect("rate_limited"),
                error_code="rate_limited",
            )
        except DiscordOAuthError as exc:
            logger.error("Discord token exchange unavailable: %s", exc)
            return CallbackOutcome(
                redirect_url=self.error_redirect("discord_unavailable"),
                error_code="discord_unavailable",
            )

        if guild_id and is_snowflake(guild_id):
            target = guild_dashboard_path(guild_id)
        else:
            target = self.post_login_target(state)
        return CallbackOutcome(
            redirect_url=target,
            access_token=str(token_payload["access_token"]),
        )

    async def session_status(self, token: str | None) -> dict[str, Any]:
        configured = self.settings.oauth_configured
        try:
            check = await self.verify_session(token)
        except DiscordOAuthError as exc:
            logger.error("Auth status check failed: %s", exc)
            raise discord_api_exception(exc) from exc

        if check.state is SessionState.NO_TOKEN:
            return {
                "authenticated": False,
                "configured": configured,
                "user": None,
                "error": "No session token found",
            }
        if not check.verified:
            return {
                "authenticated": False,
                "configured": configured,
                "user": None,
                "error": "Invalid or expired session token",
            }

        guilds: list[GuildSummary] = []
        try:
            guilds = [
                to_guild_summary(guild)
                for guild in await self.discord.fetch_user_guilds(check.token or "")
            ]
        except DiscordOAuthError as exc:
            logger.warning("Guild list unavailable during status check: %s", exc)
        manageable = filter_manageable_guilds(guilds)

        expires_at = datetime.now(timezone.utc) + timedelta(
            seconds=self.settings.DASHBOARD_SESSION_MAX_AGE_SECONDS
        )
        return {
            "authenticated": True,
            "configured": configured,
            "user": check.user,
            "guilds": {
                "total": len(guilds),
                "manageable": len(manageable),
                "items": manageable,
            },
            "session": {
                "token_preview": f"{(check.token or '')[:10]}...",
                "expires_at": expires_at,
            },
            "error": None,
        }
