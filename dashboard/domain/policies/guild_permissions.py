from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Final, TypeVar

ADMINISTRATOR: Final[int] = 0x8
MANAGE_GUILD: Final[int] = 0x20

GuildT = TypeVar("GuildT")


def parse_permissions(raw: Any) -> int:
    """Discord serializes permission bitfields as decimal strings."""
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip() or 0)
        except ValueError:
            return 0
    return 0


def has_manage_rights(*, owner: bool, permissions: int) -> bool:
    if owner:
        return True
    return bool(permissions & ADMINISTRATOR) or bool(permissions & MANAGE_GUILD)


def is_manageable(guild: Any) -> bool:
    if isinstance(guild, Mapping):
        owner = guild.get("owner") is True
        permissions = parse_permissions(guild.get("permissions"))
    else:
        owner = getattr(guild, "owner", False) is True
        permissions = parse_permissions(getattr(guild, "permissions", 0))
    return has_manage_rights(owner=owner, permissions=permissions)


def filter_manageable_guilds(guilds: Iterable[GuildT]) -> list[GuildT]:
    return [guild for guild in guilds if is_manageable(guild)]
