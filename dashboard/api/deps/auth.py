from __future__ import annotations

import logging

from fastapi import Depends, Path, Request
from fastapi.responses import RedirectResponse

from dashboard.api.deps.services import get_auth_service, get_guild_service
from dashboard.api.deps.session import (
    clear_session_cookie,
    cleared_cookie_header,
    read_session_token,
)
from dashboard.application.dto.auth import GuildSummary, SessionUser
from dashboard.application.services.auth_service import (
    AuthService,
    discord_api_exception,
)
from dashboard.application.services.guild_service import GuildService
from dashboard.core.config import DashboardSettings, get_settings
from dashboard.core.errors import ApiException, RedirectRequired
from dashboard.domain.policies.redirects import is_snowflake, login_redirect_url
from dashboard.infrastructure.discord.oauth_client import (
    DiscordOAuthError,
    DiscordRateLimitedError,
)

logger = logging.getLogger(__name__)


async def get_session_token(
    request: Request,
    settings: DashboardSettings = Depends(get_settings),
) -> str | None:
    return read_session_token(request, settings)


async def require_session_user(
    request: Request,
    token: str | None = Depends(get_session_token),
    service: AuthService = Depends(get_auth_service),
    settings: DashboardSettings = Depends(get_settings),
) -> SessionUser:
    if token is None:
        raise ApiException(
            status_code=401,
            error_code="AUTH_REQUIRED",
            message="Authentication is required for this endpoint",
        )
    try:
        check = await service.verify_session(token)
    except DiscordOAuthError as exc:
        logger.error("Session verification failed upstream: %s", exc)
        raise discord_api_exception(exc) from exc
    if not check.verified or check.user is None:
        headers = None
        if settings.DASHBOARD_CLEAR_STALE_SESSION:
            headers = {"set-cookie": cleared_cookie_header(settings)}
        raise ApiException(
            status_code=401,
            error_code="SESSION_INVALID",
            message="Session is invalid or expired",
            headers=headers,
        )
    request.state.session_user = check.user
    request.state.session_token = token
    return check.user


def requested_location(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def login_redirect(
    request: Request,
    settings: DashboardSettings,
    *,
    reason: str,
    clear_cookie: bool = False,
) -> RedirectRequired:
    response = RedirectResponse(
        login_redirect_url(settings.DASHBOARD_LOGIN_PATH, requested_location(request)),
        status_code=307,
    )
    if clear_cookie:
        clear_session_cookie(response, settings=settings)
    return RedirectRequired(response, reason=reason)


def page_failure(
    request: Request,
    settings: DashboardSettings,
    exc: DiscordOAuthError,
) -> Exception:
    """Page routes send upstream failures back through login, except rate limits."""
    if isinstance(exc, DiscordRateLimitedError):
        return discord_api_exception(exc)
    logger.warning("Discord unavailable while rendering %s: %s", request.url.path, exc)
    return login_redirect(request, settings, reason="upstream_unavailable")


async def require_page_session(
    request: Request,
    token: str | None = Depends(get_session_token),
    service: AuthService = Depends(get_auth_service),
    settings: DashboardSettings = Depends(get_settings),
) -> SessionUser:
    if token is None:
        raise login_redirect(request, settings, reason="no_token")
    try:
        check = await service.verify_session(token)
    except DiscordOAuthError as exc:
        raise page_failure(request, settings, exc) from exc
    if not check.verified or check.user is None:
        raise login_redirect(
            request,
            settings,
            reason="session_invalid",
            clear_cookie=settings.DASHBOARD_CLEAR_STALE_SESSION,
        )
    request.state.session_user = check.user
    request.state.session_token = token
    return check.user


def require_guild_id(guild_id: str = Path(...)) -> str:
    if not is_snowflake(guild_id):
        raise ApiException(
            status_code=400,
            error_code="INVALID_GUILD_ID",
            message="Guild ID must be a Discord snowflake",
            details={"guild_id": guild_id},
        )
    return guild_id


async def require_manageable_guild(
    request: Request,
    guild_id: str = Depends(require_guild_id),
    _: SessionUser = Depends(require_session_user),
    service: GuildService = Depends(get_guild_service),
) -> GuildSummary:
    return await service.get_manageable_guild(request.state.session_token, guild_id)
