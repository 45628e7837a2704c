from dashboard.application.dto.auth import GuildSummary
from dashboard.domain.policies.guild_permissions import (
    ADMINISTRATOR,
    MANAGE_GUILD,
    filter_manageable_guilds,
    has_manage_rights,
    is_manageable,
    parse_permissions,
)


def test_filter_keeps_owner_and_administrator():
    guilds = [
        {"id": "1", "owner": True, "permissions": "0"},
        {"id": "2", "owner": False, "permissions": "8"},
        {"id": "3", "owner": False, "permissions": "1"},
    ]

    assert filter_manageable_guilds(guilds) == guilds[:2]


def test_filter_keeps_manage_guild_and_preserves_order():
    guilds = [
        {"id": "9", "owner": False, "permissions": str(MANAGE_GUILD)},
        {"id": "3", "owner": False, "permissions": "2048"},
        {"id": "5", "owner": True, "permissions": "0"},
        {"id": "1", "owner": False, "permissions": str(ADMINISTRATOR | 0x400)},
    ]

    assert [guild["id"] for guild in filter_manageable_guilds(guilds)] == ["9", "5", "1"]


def test_filter_of_empty_list_is_empty():
    assert filter_manageable_guilds([]) == []


def test_owner_flag_must_be_literal_true():
    assert not is_manageable({"owner": "true", "permissions": "0"})
    assert not is_manageable({"permissions": "0"})


def test_is_manageable_accepts_guild_summaries():
    guild = GuildSummary(id="1", name="x", icon=None, owner=False, permissions=0x28)

    assert is_manageable(guild)
    assert not is_manageable(GuildSummary(id="2", name="y", icon=None, owner=False, permissions=4))


def test_has_manage_rights_bits():
    assert has_manage_rights(owner=False, permissions=0x8)
    assert has_manage_rights(owner=False, permissions=0x20)
    assert not has_manage_rights(owner=False, permissions=0x10)
    assert has_manage_rights(owner=True, permissions=0)


def test_parse_permissions_handles_discord_strings():
    assert parse_permissions("2147483647") == 2147483647
    assert parse_permissions(" 32 ") == 32
    assert parse_permissions(8) == 8
    assert parse_permissions("") == 0
    assert parse_permissions("not-a-number") == 0
    assert parse_permissions(None) == 0
    assert parse_permissions(True) == 0
