"""
Ready-made caller-supplied strategy backed by a local SQLite file.

    connection = SqliteConnectionManager()
    await connection.open(Path("data/commandcord.db"))
    options = FrameworkOptions(database=build_sqlite_database_options(connection))
"""

from __future__ import annotations

from commandcord.configuration.options import GenericDatabaseOptions
from commandcord.database.sqlite_connection import SqliteConnectionManager
from commandcord.datatypes.guild_settings import DEFAULT_PREFIX
from commandcord.persistence.strategy import GenericStrategy
from commandcord.repositories.sqlite.cooldown_repo import SqliteCooldownRepository
from commandcord.repositories.sqlite.guild_settings_repo import SqliteGuildSettingsRepository


def build_sqlite_database_options(
    connection: SqliteConnectionManager,
    default_prefix: str = DEFAULT_PREFIX,
) -> GenericDatabaseOptions:
    """Package the SQLite repositories and checks as GenericDatabaseOptions."""
    return GenericDatabaseOptions(
        is_db_connected=connection.is_connected,
        get_db_connection_status=connection.connection_status,
        guild_settings_repository=SqliteGuildSettingsRepository(connection, default_prefix),
        cooldown_repository=SqliteCooldownRepository(connection),
    )


def build_sqlite_strategy(
    connection: SqliteConnectionManager,
    default_prefix: str = DEFAULT_PREFIX,
) -> GenericStrategy:
    """Same as build_sqlite_database_options, but as a strategy that closes the connection."""
    options = build_sqlite_database_options(connection, default_prefix)
    return GenericStrategy(
        is_connected=options.is_db_connected,
        guild_settings_repository=options.guild_settings_repository,
        cooldown_repository=options.cooldown_repository,
        connection_status=options.get_db_connection_status,
        on_close=connection.close,
    )
