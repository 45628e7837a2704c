from dashboard.api.deps.auth import (
    get_session_token,
    require_manageable_guild,
    require_page_session,
    require_session_user,
)

__all__ = [
    "get_session_token",
    "require_manageable_guild",
    "require_page_session",
    "require_session_user",
]
