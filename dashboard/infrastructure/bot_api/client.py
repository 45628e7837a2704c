from __future__ import annotations

from typing import Any

import httpx

BOT_ACTIONS = frozenset({"economy/reset", "leveling/reset", "security/panic"})


class BotApiError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BotApiClient:
    """Thin client for the bot process's guild settings API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    async def get_settings(self, guild_id: str, section: str) -> dict[str, Any]:
        payload = await self._request("GET", f"/guilds/{guild_id}/settings/{section}")
        if not isinstance(payload, dict):
            raise BotApiError(f"Bot API {section} settings response was not an object")
        return payload

    async def update_settings(
        self,
        guild_id: str,
        section: str,
        settings: dict[str, Any],
    ) -> dict[str, Any]:
        payload = await self._request(
            "PUT",
            f"/guilds/{guild_id}/settings/{section}",
            json=settings,
        )
        if not isinstance(payload, dict):
            raise BotApiError(f"Bot API {section} update response was not an object")
        return payload

    async def trigger_action(self, guild_id: str, action: str) -> dict[str, Any]:
        if action not in BOT_ACTIONS:
            raise BotApiError(f"Unsupported bot action: {action}")
        payload = await self._request("POST", f"/guilds/{guild_id}/{action}")
        if not isinstance(payload, dict):
            raise BotApiError(f"Bot API {action} response was not an object")
        return payload

    async def get_connection(self, guild_id: str) -> dict[str, Any]:
        payload = await self._request("GET", f"/guilds/{guild_id}/connection")
        if not isinstance(payload, dict):
            raise BotApiError("Bot API connection response was not an object")
        return payload

    async def list_quarantine(self, guild_id: str) -> list[dict[str, Any]]:
        payload = await self._request("GET", f"/guilds/{guild_id}/security/quarantine")
        if isinstance(payload, dict):
            payload = payload.get("users")
        if not isinstance(payload, list):
            raise BotApiError("Bot API quarantine response was not a list")
        return [entry for entry in payload if isinstance(entry, dict)]

    async def release_quarantine(self, guild_id: str, user_id: str) -> dict[str, Any]:
        payload = await self._request(
            "DELETE",
            f"/guilds/{guild_id}/security/quarantine/{user_id}",
        )
        if not isinstance(payload, dict):
            raise BotApiError("Bot API quarantine release response was not an object")
        return payload

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        if not self.configured:
            raise BotApiError("DASHBOARD_API_URL is not configured")
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self.transport,
            ) as client:
                response = await client.request(
                    method,
                    f"{self.base_url}{path}",
                    headers=headers,
                    **kwargs,
                )
        except httpx.HTTPError as exc:
            raise BotApiError(
                f"Bot API {method} {path} failed: {exc.__class__.__name__}"
            ) from exc
        if response.status_code >= 400:
            raise BotApiError(
                f"Bot API {method} {path} failed ({response.status_code}): {response.text[:200]}",
                status_code=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise BotApiError(f"Bot API {method} {path} returned invalid JSON") from exc
