from __future__ import annotations

from urllib.parse import quote, urlsplit

# Upper bound for a post-login target carried through the OAuth `state`.
MAX_STATE_LENGTH = 2048


def bounded_state(state: str | None) -> str | None:
    """Trim a requested location to fit in ``state``: drop the query, then give up."""
    if not state:
        return None
    if len(state) <= MAX_STATE_LENGTH:
        return state
    path = state.split("?", 1)[0]
    return path if len(path) <= MAX_STATE_LENGTH else None


def safe_redirect_target(candidate: str | None, *, default: str) -> str:
    """Return ``candidate`` when it is a same-site absolute path, else ``default``."""
    if not candidate:
        return default
    cleaned = candidate.strip()
    if len(cleaned) > MAX_STATE_LENGTH:
        return default
    if not cleaned.startswith("/") or cleaned.startswith("//") or "\\" in cleaned:
        return default
    parts = urlsplit(cleaned)
    if parts.scheme or parts.netloc:
        return default
    return cleaned


def is_snowflake(value: str | None) -> bool:
    return bool(value) and value.isascii() and value.isdigit() and len(value) <= 20


def login_redirect_url(login_path: str, state: str | None) -> str:
    state = bounded_state(state)
    if not state:
        return login_path
    return f"{login_path}?state={quote(state, safe='')}"


def guild_dashboard_path(guild_id: str) -> str:
    return f"/dashboard/guilds/{guild_id}"
