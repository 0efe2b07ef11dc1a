"""
SQLite-backed guild settings repository.

Handles only the guild_settings table. Categories are stored as a JSON object; a NULL language means the default.
"""

from __future__ import annotations

import json
from typing import List, Optional

import aiosqlite

from commandcord.database.sqlite_connection import SqliteConnectionManager
from commandcord.datatypes.guild_settings import (
    DEFAULT_PREFIX,
    GuildPrefix,
    GuildSettingsAggregate,
)
from commandcord.repositories.guild_settings_repo import GuildSettingsRepository
from commandcord.util.logger import get_logger

logger = get_logger("sqlite_guild_settings_repo")


class SqliteGuildSettingsRepository(GuildSettingsRepository):
    """GuildSettingsRepository over the guild_settings table."""

    def __init__(self, connection: SqliteConnectionManager, default_prefix: str = DEFAULT_PREFIX):
        self._connection = connection
        self._default_prefix = default_prefix

    async def find_one(self, guild_id: str) -> Optional[GuildSettingsAggregate]:
        async with self._connection.read() as conn:
            async with conn.execute(
                "SELECT guild_id, prefix, categories, language FROM guild_settings WHERE guild_id = ?",
                (guild_id,),
            ) as cursor:
                row = await cursor.fetchone()

        if row is None:
            return None
        return self._from_row(row)

    async def find_all(self) -> List[GuildSettingsAggregate]:
        async with self._connection.read() as conn:
            async with conn.execute(
                "SELECT guild_id, prefix, categories, language FROM guild_settings"
            ) as cursor:
                rows = await cursor.fetchall()

        logger.debug("[SQLITE] Loaded %d guild settings rows", len(rows))
        return [self._from_row(row) for row in rows]

    async def save(self, settings: GuildSettingsAggregate) -> GuildSettingsAggregate:
        async with self._connection.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO guild_settings (guild_id, prefix, categories, language)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(guild_id) DO UPDATE SET
                    prefix     = excluded.prefix,
                    categories = excluded.categories,
                    language   = excluded.language,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (settings.guild_id, settings.prefix.value, json.dumps(settings.categories), settings.language),
            )

        return await self.find_one(settings.guild_id) or settings

    async def delete(self, guild_id: str) -> None:
        async with self._connection.transaction() as conn:
            await conn.execute("DELETE FROM guild_settings WHERE guild_id = ?", (guild_id,))

    def _from_row(self, row: aiosqlite.Row) -> GuildSettingsAggregate:
        return GuildSettingsAggregate(
            guild_id=row["guild_id"],
            prefix=GuildPrefix(row["prefix"] or self._default_prefix),
            categories=json.loads(row["categories"] or "{}"),
            language=row["language"],
        )
