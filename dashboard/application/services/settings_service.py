from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from dashboard.api.schemas.settings import (
    SECTION_MODELS,
    SettingsRecord,
    SettingsSection,
    default_settings,
    stored_settings,
)
from dashboard.core.errors import ApiException
from dashboard.domain.policies.settings_guardrails import SettingsGuardrails
from dashboard.infrastructure.bot_api.client import BotApiClient, BotApiError

logger = logging.getLogger(__name__)

ACTION_MESSAGES = {
    "economy/reset": "Economy has been reset",
    "leveling/reset": "Leveling progress has been reset",
    "security/panic": "Panic mode has been activated",
}


def validation_issues(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]


class SettingsService:
    def __init__(self, bot_api: BotApiClient):
        self.bot_api = bot_api

    def validate(self, section: SettingsSection, payload: Any) -> SettingsRecord:
        if not isinstance(payload, dict):
            raise ApiException(
                status_code=422,
                error_code="SETTINGS_INVALID",
                message=f"Invalid {section.value} settings data",
                details={"issues": ["body must be a JSON object"]},
            )
        body = {**payload, "section": payload.get("section", section.value)}
        try:
            record = SECTION_MODELS[section].model_validate(body)
        except ValidationError as exc:
            issues = validation_issues(exc)
            raise ApiException(
                status_code=422,
                error_code="SETTINGS_INVALID",
                message=f"Invalid {section.value} settings data",
                details={"issues": issues},
            ) from exc

        result = SettingsGuardrails.validate(
            section=section.value,
            value_json=record.model_dump(mode="json"),
        )
        if result["issues"]:
            raise ApiException(
                status_code=422,
                error_code="SETTINGS_INVALID",
                message=f"Invalid {section.value} settings data",
                details={"issues": result["issues"]},
            )
        return record

    async def get_section(self, guild_id: str, section: SettingsSection) -> dict[str, Any]:
        if self.bot_api.configured:
            try:
                payload = await self.bot_api.get_settings(guild_id, section.value)
            except BotApiError as exc:
                logger.warning(
                    "Bot API unavailable for %s settings guild_id=%s: %s",
                    section.value,
                    guild_id,
                    exc,
                )
            else:
                return {
                    "guild_id": guild_id,
                    "section": section,
                    "source": "bot_api",
                    "settings": self._stored_record(guild_id, section, payload),
                }
        return {
            "guild_id": guild_id,
            "section": section,
            "source": "defaults",
            "settings": default_settings(section),
        }

    def _stored_record(
        self,
        guild_id: str,
        section: SettingsSection,
        payload: dict[str, Any],
    ) -> SettingsRecord:
        # Stored values that fail validation surface as an error, never as defaults.
        try:
            return stored_settings(section, payload)
        except ValidationError as exc:
            logger.error(
                "Bot API returned invalid %s settings guild_id=%s errors=%s",
                section.value,
                guild_id,
                exc.error_count(),
            )
            raise ApiException(
                status_code=502,
                error_code="BOT_API_UNAVAILABLE",
                message=f"Stored {section.value} settings could not be read",
                details={"issues": validation_issues(exc)},
            ) from exc

    async def update_section(
        self,
        guild_id: str,
        section: SettingsSection,
        payload: Any,
    ) -> dict[str, Any]:
        record = self.validate(section, payload)
        body = record.model_dump(mode="json", exclude={"section"})
        try:
            applied = await self.bot_api.update_settings(guild_id, section.value, body)
        except BotApiError as exc:
            logger.error(
                "Failed to update %s settings guild_id=%s: %s",
                section.value,
                guild_id,
                exc,
            )
            raise ApiException(
                status_code=502,
                error_code="BOT_API_UNAVAILABLE",
                message=f"Failed to update {section.value} settings",
            ) from exc
        logger.info("Updated %s settings guild_id=%s", section.value, guild_id)
        return {
            "ok": True,
            "message": f"{section.value.capitalize()} settings updated successfully",
            "guild_id": guild_id,
            "section": section,
            "settings": record,
            "applied": applied,
        }

    async def run_action(self, guild_id: str, action: str) -> dict[str, Any]:
        try:
            details = await self.bot_api.trigger_action(guild_id, action)
        except BotApiError as exc:
            logger.error("Bot action %s failed guild_id=%s: %s", action, guild_id, exc)
            raise ApiException(
                status_code=502,
                error_code="BOT_API_UNAVAILABLE",
                message=f"Failed to run {action}",
            ) from exc
        logger.info("Bot action %s completed guild_id=%s", action, guild_id)
        return {
            "ok": True,
            "message": ACTION_MESSAGES.get(action, "Action completed"),
            "guild_id": guild_id,
            "action": action,
            "details": details,
        }
