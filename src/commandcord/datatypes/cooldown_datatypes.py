"""
Cooldown types and data structures.

This module defines the CooldownType enum, the CooldownEntity stored by the
cooldown repositories, and the CooldownQuery used to look a cooldown up by its
original fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from commandcord.errors import UnrecognizedCooldownScopeError


class CooldownType(Enum):
    """Whether a cooldown throttles a whole guild or each user separately."""

    GLOBAL = "global"
    PER_USER = "per-user"

    def __str__(self) -> str:
        return self.value


def resolve_cooldown_type(value: Union[CooldownType, str, None]) -> CooldownType:
    """
    Classify a raw scope value into one of the two recognized cooldown types.

    Args:
        value: A CooldownType or its string value.

    Returns:
        The matching CooldownType.

    Raises:
        UnrecognizedCooldownScopeError: If the value is anything else.
    """
    if isinstance(value, CooldownType):
        return value
    try:
        return CooldownType(value)
    except ValueError:
        raise UnrecognizedCooldownScopeError(value) from None


@dataclass(slots=True)
class CooldownEntity:
    """A single throttling counter.

    Attributes:
        command_id: Name of the throttled command.
        guild_id: Guild the cooldown applies in.
        type: Cooldown scope. Kept as given so an unrecognized value is
            rejected by identity derivation rather than at construction.
        seconds_remaining: Remaining cooldown duration in seconds.
        user_id: User the cooldown applies to (per-user scope only).
    """
    command_id: str
    guild_id: str
    type: Union[CooldownType, str]
    seconds_remaining: float = 0
    user_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class CooldownQuery:
    """Lookup key for a cooldown. A present user_id implies per-user scope."""
    command_id: str
    guild_id: str
    user_id: Optional[str] = None

    @classmethod
    def for_entity(cls, entity: CooldownEntity) -> CooldownQuery:
        cooldown_type = resolve_cooldown_type(entity.type)
        user_id = entity.user_id if cooldown_type is CooldownType.PER_USER else None
        return cls(command_id=entity.command_id, guild_id=entity.guild_id, user_id=user_id)
