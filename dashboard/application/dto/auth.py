from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SessionState(str, Enum):
    NO_TOKEN = "no_token"
    TOKEN_PRESENT_UNVERIFIED = "token_present_unverified"
    VERIFIED = "verified"
    VERIFICATION_FAILED = "verification_failed"


@dataclass(frozen=True)
class SessionUser:
    id: str
    username: str
    discriminator: str | None = None
    global_name: str | None = None
    avatar: str | None = None
    avatar_url: str | None = None
    email: str | None = None
    verified: bool | None = None
    locale: str | None = None
    mfa_enabled: bool | None = None


@dataclass(frozen=True)
class GuildSummary:
    id: str
    name: str
    icon: str | None
    owner: bool
    permissions: int


@dataclass(frozen=True)
class SessionCheck:
    state: SessionState
    token: str | None = None
    user: SessionUser | None = None

    @property
    def verified(self) -> bool:
        return self.state is SessionState.VERIFIED


@dataclass(frozen=True)
class CallbackOutcome:
    redirect_url: str
    access_token: str | None = None
    error_code: str | None = None
