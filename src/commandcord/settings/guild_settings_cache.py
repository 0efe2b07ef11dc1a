"""
In-memory cache of guild settings.

Owned by CommandFramework; nothing else should mutate it. Entries are filled
once at start-up (warm_all) or lazily on a miss, and are never re-read from
storage for the lifetime of the process.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional, Tuple

from commandcord.datatypes.guild_settings import GuildSettingsAggregate
from commandcord.util.logger import get_logger

logger = get_logger("guild_settings_cache")


class GuildSettingsCache:
    """Mapping of guild id to its GuildSettingsAggregate."""

    def __init__(self) -> None:
        self._entries: Dict[str, GuildSettingsAggregate] = {}

    def get(self, guild_id: str) -> Optional[GuildSettingsAggregate]:
        return self._entries.get(guild_id)

    def put(self, settings: GuildSettingsAggregate) -> GuildSettingsAggregate:
        self._entries[settings.guild_id] = settings
        return settings

    def remove(self, guild_id: str) -> Optional[GuildSettingsAggregate]:
        return self._entries.pop(guild_id, None)

    def warm_all(self, settings: Iterable[GuildSettingsAggregate]) -> int:
        """Insert every aggregate, keyed by its guild id. Returns the count inserted."""
        count = 0
        for entry in settings:
            self._entries[entry.guild_id] = entry
            count += 1
        logger.info("[GUILD SETTINGS CACHE] Warmed with %d guilds", count)
        return count

    def clear(self) -> None:
        self._entries.clear()

    def items(self) -> Iterator[Tuple[str, GuildSettingsAggregate]]:
        return iter(list(self._entries.items()))

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
