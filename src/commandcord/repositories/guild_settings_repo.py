"""
Storage-agnostic contract for guild settings persistence.

Concrete backends subclass GuildSettingsRepository and override every
operation they support. Anything left unimplemented raises
OperationNotImplementedError so a missing backend method can never be
mistaken for "no settings stored".
"""

from __future__ import annotations

from typing import List, Optional

from commandcord.datatypes.guild_settings import GuildSettingsAggregate
from commandcord.errors import OperationNotImplementedError


class GuildSettingsRepository:
    """CRUD contract for GuildSettingsAggregate storage."""

    async def find_one(self, guild_id: str) -> Optional[GuildSettingsAggregate]:
        """Return the stored settings for a guild, or None when none exist."""
        raise OperationNotImplementedError(type(self).__name__, "find_one")

    async def find_all(self) -> List[GuildSettingsAggregate]:
        """Return every stored guild's settings. Used once at start-up."""
        raise OperationNotImplementedError(type(self).__name__, "find_all")

    async def save(self, settings: GuildSettingsAggregate) -> GuildSettingsAggregate:
        """Upsert a guild's settings and return the persisted version."""
        raise OperationNotImplementedError(type(self).__name__, "save")

    async def delete(self, guild_id: str) -> None:
        """Remove a guild's settings. Deleting a missing guild is a no-op."""
        raise OperationNotImplementedError(type(self).__name__, "delete")
