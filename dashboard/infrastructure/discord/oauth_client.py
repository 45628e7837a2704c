from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from urllib.parse import urlencode

import httpx

DISCORD_AUTHORIZE_URL = "https://discord.com/api/oauth2/authorize"
DISCORD_TOKEN_URL = "https://discordapp.com/api/oauth2/token"
DISCORD_API_BASE_URL = "https://discord.com/api/v10"


class DiscordOAuthError(RuntimeError):
    pass


class DiscordNoAccessTokenError(DiscordOAuthError):
    pass


class DiscordUnauthorizedError(DiscordOAuthError):
    pass


class DiscordUnavailableError(DiscordOAuthError):
    pass


class DiscordRateLimitedError(DiscordOAuthError):
    def __init__(self, message: str, *, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scopes: Sequence[str],
    state: str | None = None,
    prompt: str | None = None,
    *,
    authorize_url: str = DISCORD_AUTHORIZE_URL,
) -> str:
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(scopes),
    }
    if state:
        params["state"] = state
    if prompt:
        params["prompt"] = prompt
    return f"{authorize_url}?{urlencode(params)}"


class DiscordOAuthClient:
    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scopes: Sequence[str],
        bot_token: str = "",
        api_base_url: str = DISCORD_API_BASE_URL,
        authorize_url: str = DISCORD_AUTHORIZE_URL,
        token_url: str = DISCORD_TOKEN_URL,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = tuple(scopes)
        self.bot_token = bot_token
        self.api_base_url = api_base_url.rstrip("/")
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def build_authorize_url(self, state: str | None = None, prompt: str | None = None) -> str:
        return build_authorization_url(
            self.client_id,
            self.redirect_uri,
            self.scopes,
            state=state,
            prompt=prompt,
            authorize_url=self.authorize_url,
        )

    async def exchange_code(self, code: str) -> dict[str, Any]:
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "authorization_code",
            "redirect_uri": self.redirect_uri,
            "code": code,
        }
        headers = {"Content-Type": "application/x-www-form-urlencoded"}
        response = await self._send(
            "POST",
            self.token_url,
            endpoint="token exchange",
            data=payload,
            headers=headers,
        )
        if response.status_code == 429:
            raise _rate_limited(response, endpoint="token exchange")
        if response.status_code >= 500:
            raise DiscordUnavailableError(
                f"Discord token exchange failed ({response.status_code})"
            )
        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict) or not data.get("access_token"):
            reason = data.get("error") if isinstance(data, dict) else None
            raise DiscordNoAccessTokenError(
                f"Discord token exchange returned no access_token "
                f"(status={response.status_code}, error={reason or 'unknown'})"
            )
        return data

    async def fetch_user(self, access_token: str) -> dict[str, Any]:
        payload = await self._get_json(
            "/users/@me",
            authorization=f"Bearer {access_token}",
            endpoint="/users/@me",
        )
        if not isinstance(payload, dict) or "id" not in payload:
            raise DiscordUnavailableError("Discord /users/@me response was not a user object")
        return payload

    async def fetch_user_guilds(self, access_token: str) -> list[dict[str, Any]]:
        payload = await self._get_json(
            "/users/@me/guilds",
            authorization=f"Bearer {access_token}",
            endpoint="/users/@me/guilds",
        )
        if not isinstance(payload, list):
            raise DiscordUnavailableError("Discord /users/@me/guilds response was not a list")
        return payload

    async def fetch_bot_guild_ids(self) -> set[str]:
        payload = await self._get_json(
            "/users/@me/guilds",
            authorization=self._bot_authorization("list bot guilds"),
            endpoint="bot /users/@me/guilds",
        )
        if not isinstance(payload, list):
            raise DiscordUnavailableError("Discord bot guild list response was not a list")
        return {str(guild.get("id")) for guild in payload if isinstance(guild, dict)}

    async def fetch_bot_user(self) -> dict[str, Any]:
        payload = await self._get_json(
            "/users/@me",
            authorization=self._bot_authorization("fetch the bot user"),
            endpoint="bot /users/@me",
        )
        if not isinstance(payload, dict) or "id" not in payload:
            raise DiscordUnavailableError("Discord bot user response was not a user object")
        return payload

    async def fetch_bot_member(self, guild_id: str) -> dict[str, Any]:
        payload = await self._get_json(
            f"/guilds/{guild_id}/members/@me",
            authorization=self._bot_authorization("fetch the bot guild member"),
            endpoint="guild member @me",
        )
        if not isinstance(payload, dict):
            raise DiscordUnavailableError("Discord guild member response was not an object")
        return payload

    async def fetch_guild_channels(self, guild_id: str) -> list[dict[str, Any]]:
        payload = await self._get_json(
            f"/guilds/{guild_id}/channels",
            authorization=self._bot_authorization("fetch guild channels"),
            endpoint="guild channels",
        )
        if not isinstance(payload, list):
            raise DiscordUnavailableError("Discord guild channels response was not a list")
        return payload

    async def fetch_guild_roles(self, guild_id: str) -> list[dict[str, Any]]:
        payload = await self._get_json(
            f"/guilds/{guild_id}/roles",
            authorization=self._bot_authorization("fetch guild roles"),
            endpoint="guild roles",
        )
        if not isinstance(payload, list):
            raise DiscordUnavailableError("Discord guild roles response was not a list")
        return payload

    def _bot_authorization(self, purpose: str) -> str:
        if not self.bot_token:
            raise DiscordOAuthError(f"DISCORD_BOT_TOKEN is required to {purpose}")
        return f"Bot {self.bot_token}"

    async def _get_json(self, path: str, *, authorization: str, endpoint: str) -> Any:
        response = await self._send(
            "GET",
            f"{self.api_base_url}{path}",
            endpoint=endpoint,
            headers={"Authorization": authorization},
        )
        if response.status_code == 429:
            raise _rate_limited(response, endpoint=endpoint)
        if response.status_code in {401, 403}:
            raise DiscordUnauthorizedError(
                f"Discord {endpoint} rejected credentials ({response.status_code})"
            )
        if response.status_code >= 400:
            raise DiscordUnavailableError(
                f"Discord {endpoint} failed ({response.status_code}): {response.text[:200]}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise DiscordUnavailableError(f"Discord {endpoint} returned invalid JSON") from exc

    async def _send(self, method: str, url: str, *, endpoint: str, **kwargs: Any) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self.transport,
            ) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise DiscordUnavailableError(
                f"Discord {endpoint} request failed: {exc.__class__.__name__}"
            ) from exc


def _rate_limited(response: httpx.Response, *, endpoint: str) -> DiscordRateLimitedError:
    retry_after: float | None = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("retry_after") is not None:
        try:
            retry_after = float(body["retry_after"])
        except (TypeError, ValueError):
            retry_after = None
    if retry_after is None:
        header = response.headers.get("Retry-After")
        if header:
            try:
                retry_after = float(header)
            except ValueError:
                retry_after = None
    return DiscordRateLimitedError(
        f"Discord {endpoint} rate limited", retry_after=retry_after
    )
