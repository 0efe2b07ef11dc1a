"""
Storage-agnostic contract for cooldown persistence, plus the identity rule
every backend uses to key cooldown records.
"""

from __future__ import annotations

from typing import Optional, Union

from commandcord.datatypes.cooldown_datatypes import (
    CooldownEntity,
    CooldownQuery,
    CooldownType,
    resolve_cooldown_type,
)
from commandcord.errors import InvalidCooldownError, OperationNotImplementedError

COOLDOWN_ID_SEPARATOR = "-"


def cooldown_id_from_entity(cooldown: CooldownEntity) -> str:
    """
    Derive the storage identity of a cooldown from its scope.

    global   -> "<command>-<guild>"
    per-user -> "<command>-<guild>-<user>"

    Raises:
        UnrecognizedCooldownScopeError: If the scope is not one of the two known values.
        InvalidCooldownError: If a per-user cooldown has no user id.
    """
    cooldown_type = resolve_cooldown_type(cooldown.type)
    if cooldown_type is CooldownType.GLOBAL:
        return COOLDOWN_ID_SEPARATOR.join((cooldown.command_id, cooldown.guild_id))

    if not cooldown.user_id:
        raise InvalidCooldownError(
            f"Per-user cooldown for command '{cooldown.command_id}' has no user id"
        )
    return COOLDOWN_ID_SEPARATOR.join((cooldown.command_id, cooldown.guild_id, cooldown.user_id))


def cooldown_id_from_query(query: CooldownQuery) -> str:
    """Derive the storage identity of a lookup; a user id implies per-user scope."""
    parts = [query.command_id, query.guild_id]
    if query.user_id:
        parts.append(query.user_id)
    return COOLDOWN_ID_SEPARATOR.join(parts)


def cooldown_id_for(target: Union[CooldownQuery, CooldownEntity]) -> str:
    if isinstance(target, CooldownEntity):
        return cooldown_id_from_entity(target)
    return cooldown_id_from_query(target)


class CooldownRepository:
    """CRUD contract for CooldownEntity storage."""

    async def find_one(self, query: CooldownQuery) -> Optional[CooldownEntity]:
        """Return the stored cooldown matching the query, or None."""
        raise OperationNotImplementedError(type(self).__name__, "find_one")

    async def save(self, cooldown: CooldownEntity) -> CooldownEntity:
        """Upsert a cooldown keyed by its derived identity."""
        raise OperationNotImplementedError(type(self).__name__, "save")

    async def delete(self, target: Union[CooldownQuery, CooldownEntity]) -> None:
        """Remove a cooldown. Deleting a missing cooldown is a no-op."""
        raise OperationNotImplementedError(type(self).__name__, "delete")
