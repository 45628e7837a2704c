from typing import Any


class SettingsGuardrails:
    """Cross-field rules for dashboard-managed guild settings sections."""

    @staticmethod
    def validate(*, section: str, value_json: dict[str, Any]) -> dict[str, Any]:
        issues: list[str] = []

        if section == "moderation":
            thresholds = value_json.get("warn_thresholds") or {}
            timeout_after = thresholds.get("timeout_after", 0)
            kick_after = thresholds.get("kick_after", 0)
            ban_after = thresholds.get("ban_after", 0)
            if not timeout_after <= kick_after <= ban_after:
                issues.append(
                    "warn_thresholds must satisfy timeout_after <= kick_after <= ban_after"
                )
        elif section == "economy":
            currency = value_json.get("currency") or {}
            if currency.get("starting_balance", 0) > currency.get("max_balance", 0):
                issues.append("currency.starting_balance must be <= currency.max_balance")
            banking = value_json.get("banking") or {}
            if banking.get("minimum_deposit", 0) > banking.get("maximum_deposit", 0):
                issues.append("banking.minimum_deposit must be <= banking.maximum_deposit")
        elif section == "leveling":
            xp = value_json.get("xp_per_message") or {}
            if xp.get("minimum", 0) > xp.get("maximum", 0):
                issues.append("xp_per_message.minimum must be <= xp_per_message.maximum")
            max_level = value_json.get("max_level", 0)
            seen_levels: set[int] = set()
            for reward in value_json.get("role_rewards") or []:
                level = reward.get("level", 0)
                if level > max_level:
                    issues.append(f"role_rewards level {level} exceeds max_level {max_level}")
                if level in seen_levels:
                    issues.append(f"role_rewards has duplicate level {level}")
                seen_levels.add(level)
        elif section == "security":
            anti_nuke = value_json.get("anti_nuke") or {}
            if anti_nuke.get("enabled"):
                channel_limit = (anti_nuke.get("channel_deletes") or {}).get("limit", 0)
                if channel_limit < 1 or channel_limit > 20:
                    issues.append("anti_nuke.channel_deletes.limit must be between 1 and 20")
                ban_limit = (anti_nuke.get("mass_bans") or {}).get("limit", 0)
                if ban_limit < 1 or ban_limit > 50:
                    issues.append("anti_nuke.mass_bans.limit must be between 1 and 50")
            heat = value_json.get("heat_system") or {}
            if heat.get("enabled") and heat.get("base_heat_threshold", 0) < 50:
                issues.append("heat_system.base_heat_threshold must be at least 50")

        return {"normalized_value": value_json, "issues": issues}
