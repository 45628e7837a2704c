from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse

from dashboard.api.deps.auth import get_session_token, require_session_user
from dashboard.api.deps.services import get_auth_service
from dashboard.api.deps.session import clear_session_cookie, set_session_cookie
from dashboard.api.schemas.auth import (
    AuthStatusResponse,
    GuildCollection,
    GuildSummaryResponse,
    SessionInfo,
    SessionUserResponse,
)
from dashboard.application.dto.auth import GuildSummary, SessionState, SessionUser
from dashboard.application.services.auth_service import AuthService
from dashboard.core.config import DashboardSettings, get_settings
from dashboard.infrastructure.discord.oauth_client import DiscordOAuthError

logger = logging.getLogger(__name__)

router = APIRouter()


def to_user_response(user: SessionUser) -> SessionUserResponse:
    return SessionUserResponse.model_validate(user)


def to_guild_response(guild: GuildSummary, *, bot_present: bool | None = None) -> GuildSummaryResponse:
    return GuildSummaryResponse(
        id=guild.id,
        name=guild.name,
        icon=guild.icon,
        owner=guild.owner,
        permissions=str(guild.permissions),
        bot_present=bot_present,
    )


@router.get("/login")
async def auth_login(
    request: Request,
    state: str | None = Query(default=None),
    dt: str | None = Query(default=None),
    token: str | None = Depends(get_session_token),
    service: AuthService = Depends(get_auth_service),
    settings: DashboardSettings = Depends(get_settings),
):
    force_logout = (dt or "").strip().lower() == "true"
    clear_cookie = force_logout

    if token and not force_logout:
        try:
            check = await service.verify_session(token)
        except DiscordOAuthError as exc:
            logger.warning("Could not verify existing session before login: %s", exc)
        else:
            if check.state is SessionState.VERIFIED:
                return RedirectResponse(service.post_login_target(state), status_code=307)
            clear_cookie = settings.DASHBOARD_CLEAR_STALE_SESSION

    response = RedirectResponse(service.build_login_url(state), status_code=307)
    if clear_cookie:
        clear_session_cookie(response, settings=settings)
    return response


@router.get("/callback")
async def auth_callback(
    code: str | None = Query(default=None, max_length=512),
    error: str | None = Query(default=None, max_length=128),
    guild_id: str | None = Query(default=None, max_length=32),
    state: str | None = Query(default=None),
    service: AuthService = Depends(get_auth_service),
    settings: DashboardSettings = Depends(get_settings),
):
    outcome = await service.complete_callback(
        code=code,
        error=error,
        guild_id=guild_id,
        state=state,
    )
    response = RedirectResponse(outcome.redirect_url, status_code=307)
    if outcome.access_token:
        set_session_cookie(response, settings=settings, token=outcome.access_token)
    return response


@router.get("/status", response_model=AuthStatusResponse)
async def auth_status(
    token: str | None = Depends(get_session_token),
    service: AuthService = Depends(get_auth_service),
):
    payload = await service.session_status(token)
    user = payload.get("user")
    guilds = payload.get("guilds")
    session = payload.get("session")
    return AuthStatusResponse(
        authenticated=payload["authenticated"],
        configured=payload["configured"],
        user=to_user_response(user) if user is not None else None,
        guilds=(
            GuildCollection(
                total=guilds["total"],
                manageable=guilds["manageable"],
                items=[to_guild_response(guild) for guild in guilds["items"]],
            )
            if guilds is not None
            else None
        ),
        session=SessionInfo(**session) if session is not None else None,
        error=payload.get("error"),
    )


@router.get("/me", response_model=SessionUserResponse)
async def auth_me(user: SessionUser = Depends(require_session_user)):
    return to_user_response(user)


@router.get("/logout")
async def auth_logout(settings: DashboardSettings = Depends(get_settings)):
    response = RedirectResponse("/", status_code=307)
    clear_session_cookie(response, settings=settings)
    return response
