from __future__ import annotations

from fastapi import APIRouter, Depends

from dashboard.api.deps.auth import require_manageable_guild, require_session_user
from dashboard.api.deps.services import get_bot_service
from dashboard.api.schemas.bot import (
    BotConnectionResponse,
    BotStatusResponse,
    QuarantineListResponse,
)
from dashboard.api.schemas.settings import BotActionResponse
from dashboard.application.dto.auth import GuildSummary
from dashboard.application.services.bot_service import BotService

router = APIRouter()


@router.get("/status", response_model=BotStatusResponse)
async def get_bot_status(
    _: object = Depends(require_session_user),
    service: BotService = Depends(get_bot_service),
):
    return await service.bot_status()


@router.get("/{guild_id}/connection", response_model=BotConnectionResponse)
async def get_guild_connection(
    guild: GuildSummary = Depends(require_manageable_guild),
    service: BotService = Depends(get_bot_service),
):
    return await service.guild_connection(guild.id)


@router.get("/{guild_id}/security/quarantine", response_model=QuarantineListResponse)
async def list_quarantined_users(
    guild: GuildSummary = Depends(require_manageable_guild),
    service: BotService = Depends(get_bot_service),
):
    return await service.list_quarantine(guild.id)


@router.delete("/{guild_id}/security/quarantine/{user_id}", response_model=BotActionResponse)
async def release_quarantined_user(
    user_id: str,
    guild: GuildSummary = Depends(require_manageable_guild),
    service: BotService = Depends(get_bot_service),
):
    return BotActionResponse(**await service.release_quarantine(guild.id, user_id))
