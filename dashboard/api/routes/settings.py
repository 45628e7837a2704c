from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from dashboard.api.deps.auth import require_manageable_guild
from dashboard.api.deps.services import get_settings_service
from dashboard.api.schemas.settings import (
    BotActionResponse,
    SettingsEnvelope,
    SettingsSection,
    SettingsUpdateResponse,
)
from dashboard.application.dto.auth import GuildSummary
from dashboard.application.services.settings_service import SettingsService

router = APIRouter()


@router.get("/{guild_id}/settings/{section}", response_model=SettingsEnvelope)
async def get_guild_settings(
    section: SettingsSection,
    guild: GuildSummary = Depends(require_manageable_guild),
    service: SettingsService = Depends(get_settings_service),
):
    return SettingsEnvelope(**await service.get_section(guild.id, section))


@router.api_route(
    "/{guild_id}/settings/{section}",
    methods=["PUT", "POST"],
    response_model=SettingsUpdateResponse,
)
async def update_guild_settings(
    section: SettingsSection,
    payload: Any = Body(...),
    guild: GuildSummary = Depends(require_manageable_guild),
    service: SettingsService = Depends(get_settings_service),
):
    return SettingsUpdateResponse(**await service.update_section(guild.id, section, payload))


@router.post("/{guild_id}/economy/reset", response_model=BotActionResponse)
async def reset_economy(
    guild: GuildSummary = Depends(require_manageable_guild),
    service: SettingsService = Depends(get_settings_service),
):
    return BotActionResponse(**await service.run_action(guild.id, "economy/reset"))


@router.post("/{guild_id}/leveling/reset", response_model=BotActionResponse)
async def reset_leveling(
    guild: GuildSummary = Depends(require_manageable_guild),
    service: SettingsService = Depends(get_settings_service),
):
    return BotActionResponse(**await service.run_action(guild.id, "leveling/reset"))


@router.post("/{guild_id}/security/panic", response_model=BotActionResponse)
async def activate_panic_mode(
    guild: GuildSummary = Depends(require_manageable_guild),
    service: SettingsService = Depends(get_settings_service),
):
    return BotActionResponse(**await service.run_action(guild.id, "security/panic"))
