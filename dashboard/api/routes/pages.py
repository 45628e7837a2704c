"""Server-side page contexts for the dashboard frontend.

Each route returns the props a protected page is rendered with. The page
guard runs first, so unauthenticated visitors are redirected to login with the
requested location carried as ``state``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from dashboard.api.deps.auth import page_failure, require_page_session
from dashboard.api.deps.services import get_guild_service
from dashboard.api.routes.auth import to_guild_response, to_user_response
from dashboard.application.dto.auth import SessionUser
from dashboard.application.services.guild_service import GuildService
from dashboard.core.config import DashboardSettings, get_settings
from dashboard.domain.policies.redirects import is_snowflake
from dashboard.infrastructure.discord.oauth_client import DiscordOAuthError

router = APIRouter()


@router.get("/dashboard/@me")
async def profile_page(user: SessionUser = Depends(require_page_session)):
    return {"user": to_user_response(user)}


@router.get("/dashboard")
@router.get("/dashboard/guilds")
async def guilds_page(
    request: Request,
    user: SessionUser = Depends(require_page_session),
    service: GuildService = Depends(get_guild_service),
    settings: DashboardSettings = Depends(get_settings),
):
    try:
        guilds = await service.fetch_manageable_guilds(request.state.session_token)
    except DiscordOAuthError as exc:
        raise page_failure(request, settings, exc) from exc
    return {
        "user": to_user_response(user),
        "guilds": [to_guild_response(guild) for guild in guilds],
    }


@router.get("/dashboard/guilds/{guild_id}")
async def guild_page(
    guild_id: str,
    request: Request,
    user: SessionUser = Depends(require_page_session),
    service: GuildService = Depends(get_guild_service),
    settings: DashboardSettings = Depends(get_settings),
):
    if not is_snowflake(guild_id):
        return RedirectResponse(settings.DASHBOARD_GUILDS_PATH, status_code=307)
    try:
        guilds = await service.fetch_manageable_guilds(request.state.session_token)
    except DiscordOAuthError as exc:
        raise page_failure(request, settings, exc) from exc
    guild = next((candidate for candidate in guilds if candidate.id == guild_id), None)
    if guild is None:
        return RedirectResponse(settings.DASHBOARD_GUILDS_PATH, status_code=307)
    return {"user": to_user_response(user), "guild": to_guild_response(guild)}
