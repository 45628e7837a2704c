from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, Field

Snowflake = Annotated[str, Field(pattern=r"^\d{1,20}$")]
HexColor = Annotated[str, Field(pattern=r"^#[0-9A-Fa-f]{6}$")]


class SettingsSection(str, Enum):
    GENERAL = "general"
    MODERATION = "moderation"
    ECONOMY = "economy"
    LEVELING = "leveling"
    SECURITY = "security"
    BRANDING = "branding"


class SettingsRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")


class GeneralSettings(SettingsRecord):
    section: Literal["general"] = "general"
    prefix: str = Field(default="!", min_length=1, max_length=5)
    auto_role: Snowflake | None = None
    welcome_channel: Snowflake | None = None
    logs_channel: Snowflake | None = None
    mute_role: Snowflake | None = None
    language: str = Field(default="en", min_length=2, max_length=10)
    timezone: str = Field(default="UTC", min_length=1, max_length=64)


class AutoModSettings(SettingsRecord):
    enabled: bool = True
    filter_invites: bool = True
    filter_links: bool = False
    filter_profanity: bool = True
    max_mentions: int = Field(default=5, ge=1, le=50)


class WarnThresholds(SettingsRecord):
    timeout_after: int = Field(default=3, ge=1, le=50)
    kick_after: int = Field(default=5, ge=1, le=50)
    ban_after: int = Field(default=7, ge=1, le=50)


class ModerationSettings(SettingsRecord):
    section: Literal["moderation"] = "moderation"
    enabled: bool = True
    log_channel: Snowflake | None = None
    log_channel_name: str = Field(default="aegis-logs", min_length=1, max_length=100)
    auto_role_persist: bool = False
    mute_role: Snowflake | None = None
    automod: AutoModSettings = Field(default_factory=AutoModSettings)
    warn_thresholds: WarnThresholds = Field(default_factory=WarnThresholds)


class CurrencySettings(SettingsRecord):
    name: str = Field(default="AegisCoins", min_length=1, max_length=32)
    symbol: str = Field(default="\U0001fa99", min_length=1, max_length=16)
    starting_balance: int = Field(default=1000, ge=0)
    max_balance: int = Field(default=1_000_000, ge=1)
    transfer_enabled: bool = True


class DailyBonusSettings(SettingsRecord):
    enabled: bool = True
    base_amount: int = Field(default=100, ge=0)
    streak_multiplier: float = Field(default=1.1, ge=1.0, le=10.0)
    max_streak_bonus: float = Field(default=2.0, ge=1.0, le=10.0)


class MessageRewardSettings(SettingsRecord):
    enabled: bool = True
    base_reward: int = Field(default=5, ge=0)
    cooldown_seconds: int = Field(default=60, ge=0, le=3600)
    max_per_day: int = Field(default=500, ge=0)


class BankingSettings(SettingsRecord):
    enabled: bool = True
    interest_rate: float = Field(default=0.05, ge=0.0, le=1.0)
    minimum_deposit: int = Field(default=100, ge=0)
    maximum_deposit: int = Field(default=50_000, ge=0)
    withdrawal_fee_percent: float = Field(default=0.02, ge=0.0, le=1.0)


class EconomySettings(SettingsRecord):
    section: Literal["economy"] = "economy"
    enabled: bool
    currency: CurrencySettings = Field(default_factory=CurrencySettings)
    daily_bonus: DailyBonusSettings = Field(default_factory=DailyBonusSettings)
    message_rewards: MessageRewardSettings = Field(default_factory=MessageRewardSettings)
    banking: BankingSettings = Field(default_factory=BankingSettings)


class XpRange(SettingsRecord):
    minimum: int = Field(default=15, ge=0, le=1000)
    maximum: int = Field(default=25, ge=0, le=1000)
    cooldown_seconds: int = Field(default=60, ge=0, le=3600)


class VoiceXpSettings(SettingsRecord):
    enabled: bool = True
    xp_per_minute: int = Field(default=5, ge=0, le=1000)
    minimum_users: int = Field(default=2, ge=1, le=99)
    max_per_session: int = Field(default=300, ge=0)


class RoleReward(SettingsRecord):
    level: int = Field(ge=1)
    role_id: Snowflake
    remove_previous: bool = False


class LevelingSettings(SettingsRecord):
    section: Literal["leveling"] = "leveling"
    enabled: bool = True
    xp_per_message: XpRange = Field(default_factory=XpRange)
    voice: VoiceXpSettings = Field(default_factory=VoiceXpSettings)
    formula: Literal["linear", "quadratic", "exponential"] = "quadratic"
    base_xp: int = Field(default=100, ge=1)
    multiplier: float = Field(default=1.5, gt=0.0, le=10.0)
    max_level: int = Field(default=100, ge=1, le=1000)
    announce_level_up: bool = True
    announcement_channel: Snowflake | None = None
    role_rewards: list[RoleReward] = Field(default_factory=list)


DetectionAction = Literal["quarantine", "panic_mode", "kick", "ban"]


class DetectionLimit(SettingsRecord):
    limit: int = Field(ge=1)
    timeframe_seconds: int = Field(default=30, ge=1, le=3600)
    action: DetectionAction = "quarantine"


class AntiNukeSettings(SettingsRecord):
    enabled: bool = True
    auto_quarantine: bool = True
    panic_mode: bool = False
    channel_deletes: DetectionLimit = Field(default_factory=lambda: DetectionLimit(limit=3))
    role_deletes: DetectionLimit = Field(default_factory=lambda: DetectionLimit(limit=3))
    mass_bans: DetectionLimit = Field(
        default_factory=lambda: DetectionLimit(limit=5, action="panic_mode")
    )
    mass_kicks: DetectionLimit = Field(
        default_factory=lambda: DetectionLimit(limit=10, timeframe_seconds=60)
    )
    webhook_spam: DetectionLimit = Field(default_factory=lambda: DetectionLimit(limit=3))
    quarantine_role_name: str = Field(default="Quarantined", min_length=1, max_length=100)
    auto_release_hours: int = Field(default=24, ge=0, le=720)


class HeatSystemSettings(SettingsRecord):
    enabled: bool = True
    base_heat_threshold: int = Field(default=100, ge=1)
    decay_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    decay_interval_minutes: int = Field(default=5, ge=1, le=1440)
    reset_after_hours: int = Field(default=24, ge=1, le=720)


class VerificationSettings(SettingsRecord):
    enabled: bool = False
    mode: Literal["captcha", "button", "manual"] = "captcha"
    minimum_account_age_hours: int = Field(default=24, ge=0)
    verification_channel: Snowflake | None = None
    verified_role: Snowflake | None = None
    unverified_role: Snowflake | None = None


class SecuritySettings(SettingsRecord):
    section: Literal["security"] = "security"
    anti_nuke: AntiNukeSettings = Field(default_factory=AntiNukeSettings)
    heat_system: HeatSystemSettings = Field(default_factory=HeatSystemSettings)
    verification: VerificationSettings = Field(default_factory=VerificationSettings)
    trusted_users: list[Snowflake] = Field(default_factory=list)
    trusted_roles: list[Snowflake] = Field(default_factory=list)


class BrandingSettings(SettingsRecord):
    section: Literal["branding"] = "branding"
    bot_name: str = Field(default="AegisBot", min_length=2, max_length=32)
    bot_description: str = Field(
        default="Your powerful Discord management bot", max_length=190
    )
    bot_avatar: str | None = None
    primary_color: HexColor = "#1e40af"
    secondary_color: HexColor = "#3b82f6"
    accent_color: HexColor = "#60a5fa"
    embed_color: HexColor = "#1e40af"
    theme: Literal["dark", "light", "auto"] = "dark"
    custom_logo: str | None = None
    button_style: Literal["primary", "secondary", "success", "danger"] = "primary"
    enable_custom_branding: bool = False


AnySettings = Annotated[
    Union[
        GeneralSettings,
        ModerationSettings,
        EconomySettings,
        LevelingSettings,
        SecuritySettings,
        BrandingSettings,
    ],
    Field(discriminator="section"),
]

SECTION_MODELS: dict[SettingsSection, type[SettingsRecord]] = {
    SettingsSection.GENERAL: GeneralSettings,
    SettingsSection.MODERATION: ModerationSettings,
    SettingsSection.ECONOMY: EconomySettings,
    SettingsSection.LEVELING: LevelingSettings,
    SettingsSection.SECURITY: SecuritySettings,
    SettingsSection.BRANDING: BrandingSettings,
}


def default_settings(section: SettingsSection) -> SettingsRecord:
    if section is SettingsSection.ECONOMY:
        return EconomySettings(enabled=True)
    return SECTION_MODELS[section]()


def _record_type(annotation: Any) -> type[SettingsRecord] | None:
    if isinstance(annotation, type) and issubclass(annotation, SettingsRecord):
        return annotation
    return None


def drop_unknown_keys(model: type[SettingsRecord], payload: dict[str, Any]) -> dict[str, Any]:
    """Strip keys the record does not declare, recursing into nested records.

    Stored settings may carry bookkeeping such as ``guild_id`` or
    ``updated_at``; writes stay strict, reads only keep what the record knows.
    """
    known: dict[str, Any] = {}
    for name, field in model.model_fields.items():
        if name not in payload:
            continue
        value = payload[name]
        nested = _record_type(field.annotation)
        if nested is not None and isinstance(value, dict):
            value = drop_unknown_keys(nested, value)
        elif get_origin(field.annotation) is list and isinstance(value, list):
            item_type = _record_type(next(iter(get_args(field.annotation)), None))
            if item_type is not None:
                value = [
                    drop_unknown_keys(item_type, item) if isinstance(item, dict) else item
                    for item in value
                ]
        known[name] = value
    return known


def stored_settings(section: SettingsSection, payload: dict[str, Any]) -> SettingsRecord:
    model = SECTION_MODELS[section]
    return model.model_validate({**drop_unknown_keys(model, payload), "section": section.value})


class SettingsEnvelope(BaseModel):
    guild_id: str
    section: SettingsSection
    source: Literal["bot_api", "defaults"]
    settings: AnySettings


class SettingsUpdateResponse(BaseModel):
    ok: bool
    message: str
    guild_id: str
    section: SettingsSection
    settings: AnySettings
    applied: dict[str, Any] | None = None


class BotActionResponse(BaseModel):
    ok: bool
    message: str
    guild_id: str
    action: str
    details: dict[str, Any] | None = None
