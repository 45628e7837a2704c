from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request

from dashboard.api.deps.auth import require_manageable_guild, require_session_user
from dashboard.api.deps.services import get_guild_service
from dashboard.api.routes.auth import to_guild_response
from dashboard.api.schemas.auth import GuildListResponse, GuildSummaryResponse
from dashboard.application.dto.auth import GuildSummary
from dashboard.application.services.guild_service import GuildService

router = APIRouter()


@router.get("/guilds", response_model=GuildListResponse)
async def list_manageable_guilds(
    request: Request,
    _: object = Depends(require_session_user),
    service: GuildService = Depends(get_guild_service),
):
    guilds = await service.list_manageable_guilds(request.state.session_token)
    return GuildListResponse(guilds=[GuildSummaryResponse(**guild) for guild in guilds])


@router.get("/discord/guilds", response_model=list[GuildSummaryResponse])
async def list_discord_guilds(
    request: Request,
    _: object = Depends(require_session_user),
    service: GuildService = Depends(get_guild_service),
):
    guilds = await service.list_guilds(request.state.session_token)
    return [to_guild_response(guild) for guild in guilds]


@router.get("/bot/{guild_id}/channels")
async def list_guild_channels(
    guild: GuildSummary = Depends(require_manageable_guild),
    service: GuildService = Depends(get_guild_service),
) -> list[dict[str, Any]]:
    return await service.list_channels(guild.id)


@router.get("/bot/{guild_id}/roles")
async def list_guild_roles(
    guild: GuildSummary = Depends(require_manageable_guild),
    service: GuildService = Depends(get_guild_service),
) -> list[dict[str, Any]]:
    return await service.list_roles(guild.id)
