import httpx

from tests.fakes import GUILDS_PATH, STALE_TOKEN, USER_PATH, set_cookie_headers


def test_profile_page_without_cookie_redirects_to_login(client, discord):
    response = client.get("/dashboard/@me")

    assert response.status_code == 307
    assert response.headers["location"] == "/api/auth/login?state=%2Fdashboard%2F%40me"
    assert discord.calls == []


def test_guild_page_redirect_carries_requested_location(client):
    response = client.get("/dashboard/guilds/222222222222222222", params={"tab": "economy"})

    assert response.headers["location"] == (
        "/api/auth/login?state=%2Fdashboard%2Fguilds%2F222222222222222222%3Ftab%3Deconomy"
    )


def test_stale_cookie_is_cleared_on_redirect(client, settings):
    client.cookies.set(settings.DASHBOARD_SESSION_COOKIE_NAME, STALE_TOKEN)

    response = client.get("/dashboard")

    assert response.status_code == 307
    assert response.headers["location"].startswith("/api/auth/login?state=")
    assert any("Max-Age=0" in header for header in set_cookie_headers(response))


def test_stale_cookie_kept_when_clearing_disabled(client, settings):
    settings.DASHBOARD_CLEAR_STALE_SESSION = False
    client.cookies.set(settings.DASHBOARD_SESSION_COOKIE_NAME, STALE_TOKEN)

    response = client.get("/dashboard")

    assert response.status_code == 307
    assert set_cookie_headers(response) == []


def test_profile_page_returns_user(authed_client):
    response = authed_client.get("/dashboard/@me")

    assert response.status_code == 200
    assert response.json()["user"]["global_name"] == "Nelly"


def test_guilds_page_lists_manageable_guilds(authed_client):
    for path in ("/dashboard", "/dashboard/guilds"):
        response = authed_client.get(path)

        assert response.status_code == 200
        assert [guild["id"] for guild in response.json()["guilds"]] == [
            "111111111111111111",
            "222222222222222222",
            "444444444444444444",
        ]


def test_unreachable_discord_sends_page_back_to_login(authed_client, discord):
    discord.fail("GET", USER_PATH, httpx.ReadTimeout("slow"))

    response = authed_client.get("/dashboard/@me")

    assert response.status_code == 307
    assert response.headers["location"].startswith("/api/auth/login?state=")
    assert set_cookie_headers(response) == []


def test_rate_limited_page_returns_429(authed_client, discord):
    discord.add("GET", USER_PATH, status=429, json={"retry_after": 1.5})

    response = authed_client.get("/dashboard/@me")

    assert response.status_code == 429
    assert response.headers["retry-after"] == "2"


def test_guild_list_failure_on_page_redirects_to_login(authed_client, discord):
    discord.add("GET", GUILDS_PATH, status=500, json={"message": "boom"})

    response = authed_client.get("/dashboard")

    assert response.status_code == 307
    assert response.headers["location"] == "/api/auth/login?state=%2Fdashboard"


def test_guild_page_for_manageable_guild(authed_client):
    response = authed_client.get("/dashboard/guilds/444444444444444444")

    assert response.status_code == 200
    body = response.json()
    assert body["guild"]["name"] == "Manager"
    assert body["guild"]["permissions"] == "32"


def test_guild_page_for_unmanageable_guild_goes_to_list(authed_client):
    response = authed_client.get("/dashboard/guilds/333333333333333333")

    assert response.status_code == 307
    assert response.headers["location"] == "/dashboard"


def test_guild_page_for_unknown_or_invalid_guild_goes_to_list(authed_client):
    assert authed_client.get("/dashboard/guilds/999").headers["location"] == "/dashboard"
    assert authed_client.get("/dashboard/guilds/not-a-guild").headers["location"] == "/dashboard"


def test_long_query_string_still_reaches_discord(client):
    response = client.get("/dashboard/guilds/222222222222222222", params={"q": "x" * 3000})

    assert response.status_code == 307
    login_location = response.headers["location"]
    assert login_location == "/api/auth/login?state=%2Fdashboard%2Fguilds%2F222222222222222222"

    login = client.get(login_location)

    assert login.status_code == 307
    assert login.headers["location"].startswith("https://discord.com/api/oauth2/authorize?")
