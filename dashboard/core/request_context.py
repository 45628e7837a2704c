import contextvars
import re
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default="-"
)
guild_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar(
    "guild_id", default="-"
)

# Callers may supply their own ID; it is echoed back, so keep it header-safe.
_REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")
_GUILD_PATH_PATTERN = re.compile(r"^/(?:api/bot|dashboard/guilds)/(\d{1,20})(?:/|$)")


def resolve_request_id(request: Request) -> str:
    candidate = request.headers.get("X-Request-ID", "").strip()
    if _REQUEST_ID_PATTERN.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


def guild_id_from_path(path: str) -> str | None:
    match = _GUILD_PATH_PATTERN.match(path)
    return match.group(1) if match else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds the request ID and targeted guild for log correlation."""

    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request)
        request_token = request_id_ctx.set(request_id)
        guild_token = guild_id_ctx.set(guild_id_from_path(request.url.path) or "-")
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            guild_id_ctx.reset(guild_token)
            request_id_ctx.reset(request_token)
