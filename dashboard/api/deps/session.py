from __future__ import annotations

from fastapi import Request, Response

from dashboard.core.config import DashboardSettings


def read_session_token(request: Request, settings: DashboardSettings) -> str | None:
    token = request.cookies.get(settings.DASHBOARD_SESSION_COOKIE_NAME)
    if not token or not token.strip():
        return None
    return token.strip()


def set_session_cookie(
    response: Response,
    *,
    settings: DashboardSettings,
    token: str,
) -> None:
    max_age = settings.DASHBOARD_SESSION_MAX_AGE_SECONDS
    response.set_cookie(
        key=settings.DASHBOARD_SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        expires=max_age,
        path="/",
        secure=settings.session_cookie_secure,
        httponly=True,
        samesite=settings.session_cookie_samesite,
    )


def clear_session_cookie(
    response: Response,
    *,
    settings: DashboardSettings,
) -> None:
    response.set_cookie(
        key=settings.DASHBOARD_SESSION_COOKIE_NAME,
        value="",
        max_age=0,
        expires=0,
        path="/",
        secure=settings.session_cookie_secure,
        httponly=True,
        samesite=settings.session_cookie_samesite,
    )


def cleared_cookie_header(settings: DashboardSettings) -> str:
    """Raw ``Set-Cookie`` value that expires the session cookie."""
    scratch = Response()
    clear_session_cookie(scratch, settings=settings)
    return scratch.headers["set-cookie"]
