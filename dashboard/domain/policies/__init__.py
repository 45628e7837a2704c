"""Domain policy modules."""

from dashboard.domain.policies.guild_permissions import (
    ADMINISTRATOR,
    MANAGE_GUILD,
    filter_manageable_guilds,
    is_manageable,
)
from dashboard.domain.policies.redirects import bounded_state, safe_redirect_target
from dashboard.domain.policies.settings_guardrails import SettingsGuardrails

__all__ = [
    "ADMINISTRATOR",
    "MANAGE_GUILD",
    "SettingsGuardrails",
    "bounded_state",
    "filter_manageable_guilds",
    "is_manageable",
    "safe_redirect_target",
]
