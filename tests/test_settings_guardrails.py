from dashboard.api.schemas.settings import SettingsSection, default_settings
from dashboard.domain.policies.settings_guardrails import SettingsGuardrails


def _issues(section: str, value: dict) -> list[str]:
    return SettingsGuardrails.validate(section=section, value_json=value)["issues"]


def test_defaults_pass_every_section():
    for section in SettingsSection:
        value = default_settings(section).model_dump(mode="json")
        assert _issues(section.value, value) == []


def test_moderation_thresholds_must_escalate():
    issues = _issues(
        "moderation",
        {"warn_thresholds": {"timeout_after": 5, "kick_after": 3, "ban_after": 7}},
    )

    assert issues == ["warn_thresholds must satisfy timeout_after <= kick_after <= ban_after"]


def test_economy_balance_and_deposit_limits():
    issues = _issues(
        "economy",
        {
            "currency": {"starting_balance": 10, "max_balance": 5},
            "banking": {"minimum_deposit": 100, "maximum_deposit": 50},
        },
    )

    assert len(issues) == 2


def test_leveling_role_rewards():
    issues = _issues(
        "leveling",
        {
            "xp_per_message": {"minimum": 1, "maximum": 2},
            "max_level": 10,
            "role_rewards": [
                {"level": 5, "role_id": "1"},
                {"level": 5, "role_id": "2"},
                {"level": 20, "role_id": "3"},
            ],
        },
    )

    assert issues == [
        "role_rewards has duplicate level 5",
        "role_rewards level 20 exceeds max_level 10",
    ]


def test_security_limits_only_apply_when_enabled():
    value = {
        "anti_nuke": {"enabled": False, "channel_deletes": {"limit": 99}, "mass_bans": {"limit": 99}},
        "heat_system": {"enabled": False, "base_heat_threshold": 1},
    }
    assert _issues("security", value) == []

    value["anti_nuke"]["enabled"] = True
    value["heat_system"]["enabled"] = True
    assert _issues("security", value) == [
        "anti_nuke.channel_deletes.limit must be between 1 and 20",
        "anti_nuke.mass_bans.limit must be between 1 and 50",
        "heat_system.base_heat_threshold must be at least 50",
    ]


def test_sections_without_rules_pass_through():
    result = SettingsGuardrails.validate(section="branding", value_json={"bot_name": "x"})

    assert result == {"normalized_value": {"bot_name": "x"}, "issues": []}
