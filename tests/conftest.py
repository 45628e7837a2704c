import pytest
from fastapi.testclient import TestClient

from dashboard.api.deps.services import get_bot_api_client, get_discord_client
from dashboard.app import create_app
from dashboard.core.config import DashboardSettings, get_settings
from dashboard.infrastructure.bot_api.client import BotApiClient
from dashboard.infrastructure.discord.oauth_client import DiscordOAuthClient
from tests.fakes import (
    CLIENT_ID,
    GUILDS_PATH,
    USER_PATH,
    VALID_TOKEN,
    FakeUpstream,
    guilds_endpoint,
    user_endpoint,
)


@pytest.fixture
def settings() -> DashboardSettings:
    return DashboardSettings(
        _env_file=None,
        NODE_ENV="test",
        DISCORD_CLIENT_ID=CLIENT_ID,
        DISCORD_CLIENT_SECRET="client-secret",
        DISCORD_REDIRECT_URI="http://testserver/api/auth/callback",
        DISCORD_BOT_TOKEN="bot-token",
        DASHBOARD_API_URL="http://bot.internal/api",
        DASHBOARD_API_KEY="bot-api-key",
        DASHBOARD_ENABLE_ACCESS_LOG=False,
    )


@pytest.fixture
def discord() -> FakeUpstream:
    fake = FakeUpstream()
    fake.respond_with("GET", USER_PATH, user_endpoint)
    fake.respond_with("GET", GUILDS_PATH, guilds_endpoint)
    return fake


@pytest.fixture
def bot_api() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def discord_client(settings: DashboardSettings, discord: FakeUpstream) -> DiscordOAuthClient:
    return DiscordOAuthClient(
        client_id=settings.DISCORD_CLIENT_ID,
        client_secret=settings.DISCORD_CLIENT_SECRET,
        redirect_uri=settings.DISCORD_REDIRECT_URI,
        scopes=settings.oauth_scope_list,
        bot_token=settings.DISCORD_BOT_TOKEN,
        api_base_url=settings.DISCORD_API_BASE_URL,
        authorize_url=settings.DISCORD_AUTHORIZE_URL,
        token_url=settings.DISCORD_TOKEN_URL,
        transport=discord.transport,
    )


@pytest.fixture
def bot_api_client(settings: DashboardSettings, bot_api: FakeUpstream) -> BotApiClient:
    return BotApiClient(
        base_url=settings.DASHBOARD_API_URL,
        api_key=settings.DASHBOARD_API_KEY,
        transport=bot_api.transport,
    )


@pytest.fixture
def app(settings, discord_client, bot_api_client):
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_discord_client] = lambda: discord_client
    application.dependency_overrides[get_bot_api_client] = lambda: bot_api_client
    return application


@pytest.fixture
def client(app):
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def authed_client(client, settings):
    client.cookies.set(settings.DASHBOARD_SESSION_COOKIE_NAME, VALID_TOKEN)
    return client
