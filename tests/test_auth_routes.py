from urllib.parse import parse_qs, urlsplit

import httpx

from tests.fakes import (
    CLIENT_ID,
    STALE_TOKEN,
    TOKEN_PATH,
    USER_PATH,
    VALID_TOKEN,
    set_cookie_headers,
)

COOKIE = "__SessionLuny"


def _query(location: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(location).query)


def _session_cookie(response) -> str:
    cookies = [header for header in set_cookie_headers(response) if header.startswith(f"{COOKIE}=")]
    assert len(cookies) == 1
    return cookies[0]


def test_login_without_cookie_redirects_to_discord(client, discord):
    response = client.get("/api/auth/login")

    assert response.status_code == 307
    location = response.headers["location"]
    assert location.startswith("https://discord.com/api/oauth2/authorize?")
    query = _query(location)
    assert query["response_type"] == ["code"]
    assert query["client_id"] == [CLIENT_ID]
    assert query["scope"] == ["identify guilds"]
    assert query["prompt"] == ["none"]
    assert query["redirect_uri"] == ["http://testserver/api/auth/callback"]
    assert "state" not in query
    assert discord.calls == []


def test_login_forwards_state_to_discord(client):
    response = client.get("/api/auth/login", params={"state": "/dashboard/guilds/222222222222222222"})

    assert _query(response.headers["location"])["state"] == ["/dashboard/guilds/222222222222222222"]


def test_login_with_valid_session_skips_discord(authed_client, discord):
    response = authed_client.get("/api/auth/login", params={"state": "/dashboard/x"})

    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard/x"
    assert discord.paths() == [USER_PATH]


def test_login_with_valid_session_defaults_to_profile(authed_client):
    response = authed_client.get("/api/auth/login")

    assert response.headers["location"] == "/dashboard/@me"


def test_login_with_valid_session_ignores_offsite_state(authed_client):
    response = authed_client.get("/api/auth/login", params={"state": "https://evil.example"})

    assert response.headers["location"] == "/dashboard/@me"


def test_login_with_dt_clears_cookie_and_restarts_flow(authed_client, discord):
    response = authed_client.get("/api/auth/login", params={"dt": "true"})

    assert response.headers["location"].startswith("https://discord.com/api/oauth2/authorize?")
    assert "Max-Age=0" in _session_cookie(response)
    assert discord.calls == []


def test_login_with_stale_cookie_clears_it(client, settings):
    client.cookies.set(settings.DASHBOARD_SESSION_COOKIE_NAME, STALE_TOKEN)

    response = client.get("/api/auth/login")

    assert response.headers["location"].startswith("https://discord.com/api/oauth2/authorize?")
    assert "Max-Age=0" in _session_cookie(response)


def test_login_keeps_cookie_when_discord_unreachable(authed_client, discord):
    discord.fail("GET", USER_PATH, httpx.ConnectError("down"))

    response = authed_client.get("/api/auth/login")

    assert response.headers["location"].startswith("https://discord.com/api/oauth2/authorize?")
    assert set_cookie_headers(response) == []


def test_login_without_oauth_config_returns_500(client, settings):
    settings.DISCORD_CLIENT_ID = ""

    response = client.get("/api/auth/login")

    assert response.status_code == 500
    assert response.json()["error_code"] == "OAUTH_CONFIG_MISSING"


def test_callback_access_denied_goes_home(client, discord):
    response = client.get("/api/auth/callback", params={"error": "access_denied", "code": "x"})

    assert response.status_code == 307
    assert response.headers["location"] == "/"
    assert set_cookie_headers(response) == []
    assert discord.calls == []


def test_callback_other_error_goes_to_login_page(client):
    response = client.get("/api/auth/callback", params={"error": "invalid_scope"})

    assert response.headers["location"] == "/login?error=invalid_scope"


def test_callback_without_code_sets_no_cookie(client, discord):
    response = client.get("/api/auth/callback")

    assert response.headers["location"] == "/login?error=missing_code"
    assert set_cookie_headers(response) == []
    assert discord.calls == []


def test_callback_sets_session_cookie(client, discord):
    discord.add("POST", TOKEN_PATH, json={"access_token": VALID_TOKEN, "token_type": "Bearer"})

    response = client.get("/api/auth/callback", params={"code": "abc"})

    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard/@me"
    cookie = _session_cookie(response)
    assert cookie.startswith(f"{COOKIE}={VALID_TOKEN};")
    assert "HttpOnly" in cookie
    assert "Max-Age=18000" in cookie
    assert "Path=/" in cookie
    assert "Secure" in cookie
    assert "samesite=lax" in cookie.lower()


def test_callback_redirects_to_guild_when_given(client, discord):
    discord.add("POST", TOKEN_PATH, json={"access_token": VALID_TOKEN})

    response = client.get(
        "/api/auth/callback",
        params={"code": "abc", "guild_id": "222222222222222222", "state": "/dashboard"},
    )

    assert response.headers["location"] == "/dashboard/guilds/222222222222222222"


def test_callback_redirects_to_state(client, discord):
    discord.add("POST", TOKEN_PATH, json={"access_token": VALID_TOKEN})

    response = client.get("/api/auth/callback", params={"code": "abc", "state": "/dashboard"})

    assert response.headers["location"] == "/dashboard"


def test_callback_rejects_offsite_state(client, discord):
    discord.add("POST", TOKEN_PATH, json={"access_token": VALID_TOKEN})

    response = client.get(
        "/api/auth/callback",
        params={"code": "abc", "state": "https://evil.example/"},
    )

    assert response.headers["location"] == "/dashboard/@me"


def test_callback_without_access_token_sets_no_cookie(client, discord):
    discord.add("POST", TOKEN_PATH, status=400, json={"error": "invalid_grant"})

    response = client.get("/api/auth/callback", params={"code": "expired"})

    assert response.headers["location"] == "/login?error=token_exchange_failed"
    assert set_cookie_headers(response) == []


def test_callback_rate_limited(client, discord):
    discord.add("POST", TOKEN_PATH, status=429, json={"retry_after": 1})

    response = client.get("/api/auth/callback", params={"code": "abc"})

    assert response.headers["location"] == "/login?error=rate_limited"


def test_callback_cookie_not_secure_in_development(client, discord, settings):
    settings.NODE_ENV = "development"
    discord.add("POST", TOKEN_PATH, json={"access_token": VALID_TOKEN})

    response = client.get("/api/auth/callback", params={"code": "abc"})

    assert "Secure" not in _session_cookie(response)


def test_status_without_cookie(client):
    response = client.get("/api/auth/status")

    assert response.status_code == 200
    assert response.json()["authenticated"] is False
    assert response.json()["error"] == "No session token found"


def test_status_with_stale_cookie(client, settings):
    client.cookies.set(settings.DASHBOARD_SESSION_COOKIE_NAME, STALE_TOKEN)

    body = client.get("/api/auth/status").json()

    assert body["authenticated"] is False
    assert body["error"] == "Invalid or expired session token"


def test_status_with_valid_cookie(authed_client):
    body = authed_client.get("/api/auth/status").json()

    assert body["authenticated"] is True
    assert body["configured"] is True
    assert body["user"]["id"] == "80351110224678912"
    assert body["user"]["avatar_url"].startswith("https://cdn.discordapp.com/avatars/80351110224678912/")
    assert body["guilds"]["total"] == 4
    assert body["guilds"]["manageable"] == 3
    assert [guild["id"] for guild in body["guilds"]["list"]] == [
        "111111111111111111",
        "222222222222222222",
        "444444444444444444",
    ]
    assert "items" not in body["guilds"]
    assert body["session"]["token_preview"] == f"{VALID_TOKEN[:10]}..."


def test_me_requires_session(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["error_code"] == "AUTH_REQUIRED"
    assert response.json()["request_id"]


def test_me_with_stale_cookie_clears_it(client, settings):
    client.cookies.set(settings.DASHBOARD_SESSION_COOKIE_NAME, STALE_TOKEN)

    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["error_code"] == "SESSION_INVALID"
    assert "Max-Age=0" in _session_cookie(response)


def test_me_returns_user(authed_client):
    response = authed_client.get("/api/auth/me")

    assert response.status_code == 200
    assert response.json()["username"] == "nelly"


def test_me_surfaces_rate_limit(authed_client, discord):
    discord.add("GET", USER_PATH, status=429, json={"retry_after": 3.2})

    response = authed_client.get("/api/auth/me")

    assert response.status_code == 429
    assert response.headers["retry-after"] == "4"
    assert response.json()["error_code"] == "DISCORD_RATE_LIMITED"


def test_me_when_discord_down_returns_500(authed_client, discord):
    discord.add("GET", USER_PATH, status=503, json={"message": "unavailable"})

    response = authed_client.get("/api/auth/me")

    assert response.status_code == 500
    assert response.json()["error_code"] == "DISCORD_UNAVAILABLE"


def test_logout_clears_cookie(authed_client):
    response = authed_client.get("/api/auth/logout")

    assert response.status_code == 307
    assert response.headers["location"] == "/"
    assert "Max-Age=0" in _session_cookie(response)


def test_login_with_oversized_state_redirects_instead_of_rejecting(client):
    state = "/dashboard/guilds/1?q=" + "x" * 3000

    response = client.get("/api/auth/login", params={"state": state})

    assert response.status_code == 307
    assert _query(response.headers["location"])["state"] == ["/dashboard/guilds/1"]


def test_login_with_valid_session_and_oversized_state_uses_default(authed_client):
    response = authed_client.get("/api/auth/login", params={"state": "/" + "a" * 3000})

    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard/@me"
