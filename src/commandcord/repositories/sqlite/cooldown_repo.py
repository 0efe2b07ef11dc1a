"""
SQLite-backed cooldown repository.

Uses the same identity rule as the document store, so a cooldown keeps its
key when a bot moves between backends.
"""

from __future__ import annotations

from typing import Optional, Union

from commandcord.database.sqlite_connection import SqliteConnectionManager
from commandcord.datatypes.cooldown_datatypes import (
    CooldownEntity,
    CooldownQuery,
    resolve_cooldown_type,
)
from commandcord.repositories.cooldown_repo import (
    CooldownRepository,
    cooldown_id_for,
    cooldown_id_from_entity,
    cooldown_id_from_query,
)


class SqliteCooldownRepository(CooldownRepository):
    """CooldownRepository over the cooldowns table."""

    def __init__(self, connection: SqliteConnectionManager):
        self._connection = connection

    async def find_one(self, query: CooldownQuery) -> Optional[CooldownEntity]:
        async with self._connection.read() as conn:
            async with conn.execute(
                "SELECT type, cooldown FROM cooldowns WHERE id = ? AND name = ?",
                (cooldown_id_from_query(query), query.command_id),
            ) as cursor:
                row = await cursor.fetchone()

        if row is None:
            return None

        return CooldownEntity(
            command_id=query.command_id,
            guild_id=query.guild_id,
            user_id=query.user_id,
            type=resolve_cooldown_type(row["type"]),
            seconds_remaining=row["cooldown"],
        )

    async def save(self, cooldown: CooldownEntity) -> CooldownEntity:
        _id = cooldown_id_from_entity(cooldown)
        cooldown_type = resolve_cooldown_type(cooldown.type).value

        async with self._connection.transaction() as conn:
            await conn.execute(
                """
                INSERT INTO cooldowns (id, name, type, cooldown)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET cooldown = excluded.cooldown
                WHERE cooldowns.name = excluded.name AND cooldowns.type = excluded.type
                """,
                (_id, cooldown.command_id, cooldown_type, cooldown.seconds_remaining),
            )
        return cooldown

    async def delete(self, target: Union[CooldownQuery, CooldownEntity]) -> None:
        _id = cooldown_id_for(target)
        async with self._connection.transaction() as conn:
            await conn.execute(
                "DELETE FROM cooldowns WHERE id = ? AND name = ?",
                (_id, target.command_id),
            )
