"""
Composition root for Commandcord.

CommandFramework wires the selected persistence strategy, owns the guild
settings cache and exposes the operations command collaborators call:

- get_or_create_guild_settings(guild_id): cache-aside read
- set_prefix(guild, prefix) / set_language(guild, language) /
  set_category_emoji(...): mutate and persist
- is_db_connected() / connection_status(): state of the active strategy
- guild_settings_repository / cooldown_repository: guarded repository access

Typical start-up::

    framework = CommandFramework(bot, FrameworkOptions(database=MongoDatabaseOptions(uri)))
    await framework.setup()
"""

from __future__ import annotations

import asyncio
import inspect
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from commandcord.configuration.options import CategorySetting, FrameworkOptions
from commandcord.cooldowns.cooldown_manager import CooldownManager
from commandcord.cooldowns.cooldown_sync_scheduler import CooldownSyncScheduler
from commandcord.datatypes.db_datatypes import DbConnectionStatus
from commandcord.datatypes.guild_settings import GuildPrefix, GuildSettingsAggregate
from commandcord.errors import (
    DatabaseNotConnectedError,
    RepositoryNotConfiguredError,
    StrategyAlreadySelectedError,
    UnsupportedLanguageError,
)
from commandcord.persistence.strategy import PersistenceStrategy, select_strategy
from commandcord.repositories.cooldown_repo import CooldownRepository
from commandcord.repositories.guild_settings_repo import GuildSettingsRepository
from commandcord.settings.guild_settings_cache import GuildSettingsCache
from commandcord.util.logger import get_logger

logger = get_logger("command_framework")

DEFAULT_CATEGORIES = [
    CategorySetting(name="Configuration", emoji="⚙"),
    CategorySetting(name="Help", emoji="❓"),
]


class FrameworkEvent(Enum):
    """Events emitted by CommandFramework."""

    DATABASE_CONNECTED = "database_connected"
    LANGUAGE_NOT_SUPPORTED = "language_not_supported"

    def __str__(self) -> str:
        return self.value


def guild_key(guild: Any) -> str:
    """Normalise a guild object, snowflake or string into the cache key."""
    return str(getattr(guild, "id", guild))


class CommandFramework:
    """
    Per-guild settings and persistence hub for the command framework.

    Args:
        client: The Discord client (py-cord Bot) the framework runs beside.
        options: Framework options; defaults are used when omitted.
        strategy: A pre-built persistence strategy. When given it replaces
            whatever ``options.database`` would have selected.
    """

    def __init__(
        self,
        client: Any,
        options: Optional[FrameworkOptions] = None,
        strategy: Optional[PersistenceStrategy] = None,
    ) -> None:
        if client is None:
            raise ValueError("No Discord client provided as first argument!")

        self._client = client
        self._options = options or FrameworkOptions()
        self._default_prefix = self._options.default_prefix
        self._strategy = strategy
        self._strategy_selected = strategy is not None
        self._guild_settings = GuildSettingsCache()
        self._unpersisted_guilds: Set[str] = set()
        self._guild_locks: Dict[str, asyncio.Lock] = {}
        self._categories: Dict[str, str] = {}
        self._hidden_categories: List[str] = []
        self._listeners: Dict[FrameworkEvent, List[Callable[..., Any]]] = {}
        self._cooldowns = CooldownManager(self)
        self._cooldown_sync = CooldownSyncScheduler(self._cooldowns)
        self._ready = False

    # ========== Lifecycle ==========

    async def setup(self) -> CommandFramework:
        """
        Select the persistence strategy, connect and warm the settings cache.

        Raises:
            InvalidConfigurationPathError: If a directory option is malformed.
            StrategyAlreadySelectedError: If setup() already ran.
            DatabaseNotConnectedError: If a backend is configured but unreachable.
        """
        if self._ready:
            raise StrategyAlreadySelectedError("CommandFramework.setup() has already run")

        self._options.validate_paths()

        if not self._strategy_selected:
            self._strategy = select_strategy(self._options.database, self._default_prefix)
            self._strategy_selected = True

        if self._strategy is None:
            if self._options.show_warns:
                logger.warning(
                    "[COMMAND FRAMEWORK] No database connection info provided. "
                    "Prefixes and persistent cooldowns will not be stored."
                )
            await self.emit(FrameworkEvent.DATABASE_CONNECTED, DbConnectionStatus.NO_DATABASE)
        else:
            await self._strategy.connect()
            status = self.connection_status()
            await self.emit(FrameworkEvent.DATABASE_CONNECTED, status)

            if not self.is_db_connected():
                raise DatabaseNotConnectedError(f"Database not connected! (status: {status})")

            await self.warm_guild_settings()
            self._cooldown_sync.start()

        self.set_category_settings(DEFAULT_CATEGORIES)
        self._ready = True
        logger.info("[COMMAND FRAMEWORK] Framework is now running.")
        return self

    async def shutdown(self) -> None:
        """Flush cooldowns, stop the sync task and close the strategy."""
        await self._cooldown_sync.shutdown()
        if self._strategy is not None:
            await self._strategy.close()
        logger.info("[COMMAND FRAMEWORK] Shutdown complete")

    @property
    def cooldowns(self) -> CooldownManager:
        return self._cooldowns

    async def warm_guild_settings(self) -> int:
        """Load every stored guild into the cache. Guarded by the connectivity check."""
        settings = await self.guild_settings_repository.find_all()
        return self._guild_settings.warm_all(settings)

    # ========== Events ==========

    def on(self, event: FrameworkEvent, callback: Callable[..., Any]) -> None:
        """Register a listener. Coroutine functions are awaited when the event fires."""
        self._listeners.setdefault(event, []).append(callback)

    async def emit(self, event: FrameworkEvent, *args: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            result = callback(*args)
            if inspect.isawaitable(result):
                await result

    # ========== Persistence state ==========

    def is_db_connected(self) -> bool:
        return self._strategy is not None and self._strategy.is_connected()

    def connection_status(self) -> DbConnectionStatus:
        if self._strategy is None:
            return DbConnectionStatus.NO_DATABASE if self._strategy_selected else DbConnectionStatus.UNKNOWN
        return self._strategy.connection_status()

    @property
    def guild_settings_repository(self) -> GuildSettingsRepository:
        if not self.is_db_connected():
            raise DatabaseNotConnectedError()
        repository = self._strategy.guild_settings_repository
        if repository is None:
            raise RepositoryNotConfiguredError("No guild settings repository configured")
        return repository

    @property
    def cooldown_repository(self) -> CooldownRepository:
        if not self.is_db_connected():
            raise DatabaseNotConnectedError()
        repository = self._strategy.cooldown_repository
        if repository is None:
            raise RepositoryNotConfiguredError("No cooldown repository configured")
        return repository

    # ========== Guild settings ==========

    @property
    def guild_settings(self) -> GuildSettingsCache:
        return self._guild_settings

    async def get_or_create_guild_settings(self, guild_id: str) -> GuildSettingsAggregate:
        """
        Return the cached settings for a guild, reading storage only on a miss.

        A guild with nothing stored gets a fresh aggregate with the default
        prefix; it is cached but not persisted until something changes, and
        follows set_default_prefix() until then.
        """
        guild_id = guild_key(guild_id)
        settings = self._guild_settings.get(guild_id)
        if settings is not None:
            return settings

        settings = await self.guild_settings_repository.find_one(guild_id)
        stored = settings is not None
        if not stored:
            settings = GuildSettingsAggregate(guild_id=guild_id, prefix=GuildPrefix(self._default_prefix))

        # Another task may have filled the entry while we were suspended
        cached = self._guild_settings.get(guild_id)
        if cached is not None:
            return cached
        if not stored:
            self._unpersisted_guilds.add(guild_id)
        return self._guild_settings.put(settings)

    async def set_prefix(self, guild: Any, prefix: str) -> None:
        """Persist a new prefix for the guild. Does nothing without a guild (DMs)."""
        if guild is None:
            return

        new_prefix = GuildPrefix(prefix)
        await self._mutate_and_persist(guild_key(guild), lambda settings: settings.set_prefix(new_prefix))
        logger.info("[COMMAND FRAMEWORK] Prefix for guild %s set to %r", guild_key(guild), new_prefix.value)

    async def set_language(self, guild: Any, language: str) -> str:
        """
        Persist the reply language for the guild and return it lower-cased.

        Raises:
            UnsupportedLanguageError: If the language is not in supported_languages.
                LANGUAGE_NOT_SUPPORTED is emitted before raising.
        """
        language = (language or "").strip().lower()
        if guild is None:
            return language

        if language not in self._options.supported_languages:
            await self.emit(FrameworkEvent.LANGUAGE_NOT_SUPPORTED, guild, language)
            raise UnsupportedLanguageError(language)

        await self._mutate_and_persist(guild_key(guild), lambda settings: settings.set_language(language))
        logger.info("[COMMAND FRAMEWORK] Language for guild %s set to %r", guild_key(guild), language)
        return language

    async def set_category_emoji(self, guild: Any, category: str, emoji: str) -> None:
        """Persist a guild-specific emoji for a help category."""
        if guild is None:
            return
        await self._mutate_and_persist(
            guild_key(guild), lambda settings: settings.set_category_emoji(category, emoji)
        )

    async def remove_guild_settings(self, guild: Any) -> None:
        """Delete a guild's stored settings and drop it from the cache."""
        guild_id = guild_key(guild)
        async with self._lock_for(guild_id):
            await self.guild_settings_repository.delete(guild_id)
            self._guild_settings.remove(guild_id)
            self._unpersisted_guilds.discard(guild_id)
        logger.info("[COMMAND FRAMEWORK] Removed settings for guild %s", guild_id)

    def get_prefix(self, guild: Any) -> str:
        """Cache-only prefix lookup; the default prefix for DMs and unknown guilds."""
        if guild is None:
            return self._default_prefix
        settings = self._guild_settings.get(guild_key(guild))
        return settings.prefix.value if settings is not None else self._default_prefix

    def get_language(self, guild: Any) -> str:
        """Cache-only language lookup; the default language for DMs and unknown guilds."""
        if guild is None:
            return self._options.default_language
        settings = self._guild_settings.get(guild_key(guild))
        if settings is None or not settings.language:
            return self._options.default_language
        return settings.language

    @property
    def supported_languages(self) -> List[str]:
        return self._options.supported_languages

    @property
    def default_prefix(self) -> str:
        return self._default_prefix

    def set_default_prefix(self, prefix: str) -> CommandFramework:
        new_prefix = GuildPrefix(prefix)
        self._default_prefix = new_prefix.value
        for guild_id in self._unpersisted_guilds:
            settings = self._guild_settings.get(guild_id)
            if settings is not None:
                updated = settings.copy()
                updated.set_prefix(new_prefix)
                self._guild_settings.put(updated)
        return self

    def _lock_for(self, guild_id: str) -> asyncio.Lock:
        if guild_id not in self._guild_locks:
            self._guild_locks[guild_id] = asyncio.Lock()
        return self._guild_locks[guild_id]

    async def _mutate_and_persist(
        self, guild_id: str, mutate: Callable[[GuildSettingsAggregate], None]
    ) -> GuildSettingsAggregate:
        # Serialised per guild; the cache only ever holds what storage returned
        async with self._lock_for(guild_id):
            current = await self.get_or_create_guild_settings(guild_id)
            candidate = current.copy()
            mutate(candidate)
            updated = await self.guild_settings_repository.save(candidate)
            self._unpersisted_guilds.discard(guild_id)
            return self._guild_settings.put(updated)

    # ========== Categories ==========

    @property
    def categories(self) -> Dict[str, str]:
        return self._categories

    @property
    def hidden_categories(self) -> List[str]:
        return self._hidden_categories

    def set_category_settings(self, categories: Iterable[CategorySetting]) -> CommandFramework:
        for category in categories:
            emoji = self._resolve_emoji(category)

            if emoji and emoji in self._categories.values():
                logger.warning(
                    "[COMMAND FRAMEWORK] The emoji %r for category %r is already used.",
                    emoji, category.name,
                )

            self._categories[category.name] = emoji or self._categories.get(category.name) or ""

            if category.hidden and category.name not in self._hidden_categories:
                self._hidden_categories.append(category.name)

        return self

    def get_emoji(self, category: str, guild_id: Optional[str] = None) -> str:
        if guild_id is not None:
            settings = self._guild_settings.get(guild_key(guild_id))
            if settings is not None:
                override = settings.get_category_emoji(category)
                if override:
                    return override
        return self._categories.get(category, "")

    def get_category(self, emoji: Optional[str]) -> str:
        for name, value in self._categories.items():
            if emoji == value:
                return name
        return ""

    def _resolve_emoji(self, category: CategorySetting) -> Optional[str]:
        emoji = category.emoji or ""
        custom = category.custom_emoji

        # "<:name:id>" -> id
        if emoji.startswith("<:") and emoji.endswith(">"):
            custom = True
            emoji = emoji.split(":")[2][:-1]

        if not custom:
            return emoji

        resolved = self._client.get_emoji(int(emoji)) if emoji.isdigit() else None
        return str(resolved) if resolved is not None else None

    # ========== Options passthrough ==========

    @property
    def client(self) -> Any:
        return self._client

    @property
    def options(self) -> FrameworkOptions:
        return self._options

    @property
    def test_servers(self) -> List[str]:
        return self._options.test_servers

    @property
    def bot_owners(self) -> List[str]:
        return self._options.bot_owners

    @property
    def show_warns(self) -> bool:
        return self._options.show_warns
