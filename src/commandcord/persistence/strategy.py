"""
Persistence strategy selection.

A strategy bundles its connectivity checks with the two
repositories. It is chosen once, when the framework starts, from the
``database`` option:

- MongoDatabaseOptions   -> MongoStrategy (built-in, motor)
- GenericDatabaseOptions -> GenericStrategy (caller-supplied)
- None / Mongo without a URI -> no strategy, the bot runs without persistence
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from commandcord.configuration.options import (
    DatabaseOptions,
    GenericDatabaseOptions,
    MongoDatabaseOptions,
)
from commandcord.database.mongo_connection import CONNECTED, MongoConnection
from commandcord.datatypes.db_datatypes import DbConnectionStatus, DbConnectionStrategy
from commandcord.datatypes.guild_settings import DEFAULT_PREFIX
from commandcord.repositories.cooldown_repo import CooldownRepository
from commandcord.repositories.guild_settings_repo import GuildSettingsRepository
from commandcord.repositories.mongo.cooldown_repo import COOLDOWNS_COLLECTION, MongoCooldownRepository
from commandcord.repositories.mongo.guild_settings_repo import (
    GUILD_SETTINGS_COLLECTION,
    MongoGuildSettingsRepository,
)
from commandcord.util.logger import get_logger

logger = get_logger("persistence_strategy")


class PersistenceStrategy:
    """Common surface of every strategy."""

    kind: DbConnectionStrategy

    def __init__(self) -> None:
        self.guild_settings_repository: Optional[GuildSettingsRepository] = None
        self.cooldown_repository: Optional[CooldownRepository] = None

    async def connect(self) -> None:
        """Establish connectivity. Suspends on I/O for the built-in strategy."""

    async def close(self) -> None:
        """Release any resources held by the strategy."""

    def is_connected(self) -> bool:
        raise NotImplementedError

    def connection_status(self) -> DbConnectionStatus:
        raise NotImplementedError


class MongoStrategy(PersistenceStrategy):
    """Built-in strategy: motor client plus the document-store repositories."""

    kind = DbConnectionStrategy.MONGO

    def __init__(
        self,
        mongo_uri: str,
        db_options: Optional[Dict[str, Any]] = None,
        default_prefix: str = DEFAULT_PREFIX,
        connection: Optional[MongoConnection] = None,
    ) -> None:
        super().__init__()
        self._default_prefix = default_prefix
        self._connection = connection or MongoConnection(mongo_uri, db_options)

    async def connect(self) -> None:
        await self._connection.open()
        if not self.is_connected():
            return

        database = self._connection.database
        self.guild_settings_repository = MongoGuildSettingsRepository(
            database[GUILD_SETTINGS_COLLECTION], default_prefix=self._default_prefix
        )
        self.cooldown_repository = MongoCooldownRepository(database[COOLDOWNS_COLLECTION])

    async def close(self) -> None:
        await self._connection.close()

    def is_connected(self) -> bool:
        return self._connection.ready_state == CONNECTED

    def connection_status(self) -> DbConnectionStatus:
        return DbConnectionStatus.from_ready_state(self._connection.ready_state)


class GenericStrategy(PersistenceStrategy):
    """Caller-supplied strategy: checks and repositories are injected as-is."""

    kind = DbConnectionStrategy.GENERIC

    def __init__(
        self,
        is_connected: Callable[[], bool],
        guild_settings_repository: Optional[GuildSettingsRepository],
        cooldown_repository: Optional[CooldownRepository],
        connection_status: Optional[Callable[[], DbConnectionStatus]] = None,
        on_close: Optional[Callable[[], Any]] = None,
    ) -> None:
        super().__init__()
        self._is_connected = is_connected
        self._connection_status = connection_status
        self._on_close = on_close
        self.guild_settings_repository = guild_settings_repository
        self.cooldown_repository = cooldown_repository

    async def close(self) -> None:
        if self._on_close is None:
            return
        result = self._on_close()
        if hasattr(result, "__await__"):
            await result

    def is_connected(self) -> bool:
        return bool(self._is_connected())

    def connection_status(self) -> DbConnectionStatus:
        if self._connection_status is None:
            return DbConnectionStatus.UNKNOWN
        return self._connection_status()


def select_strategy(
    database: Optional[DatabaseOptions],
    default_prefix: str = DEFAULT_PREFIX,
) -> Optional[PersistenceStrategy]:
    """
    Build the strategy described by the ``database`` option.

    Returns:
        The selected strategy, or None when no usable database is configured.
    """
    if isinstance(database, MongoDatabaseOptions) and database.mongo_uri:
        logger.info("[PERSISTENCE] Using built-in MongoDB strategy")
        return MongoStrategy(database.mongo_uri, database.db_options, default_prefix=default_prefix)

    if isinstance(database, GenericDatabaseOptions):
        logger.info("[PERSISTENCE] Using caller-supplied strategy")
        return GenericStrategy(
            is_connected=database.is_db_connected,
            guild_settings_repository=database.guild_settings_repository,
            cooldown_repository=database.cooldown_repository,
            connection_status=database.get_db_connection_status,
        )

    return None
