"""
MongoDB-backed cooldown repository.

Document layout:
    { _id: <derived identity>, name: <command id>, type: <scope>, cooldown: <seconds remaining> }

Writes filter on the derived identity and the immutable discriminator fields
(name, type) together, so two differently-scoped cooldowns whose identities
happen to coincide never overwrite each other.
"""

from __future__ import annotations

from typing import Optional, Union

from motor.motor_asyncio import AsyncIOMotorCollection

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
from commandcord.util.logger import get_logger

logger = get_logger("mongo_cooldown_repo")

COOLDOWNS_COLLECTION = "cooldowns"


class MongoCooldownRepository(CooldownRepository):
    """CooldownRepository over a motor collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self._collection = collection

    async def find_one(self, query: CooldownQuery) -> Optional[CooldownEntity]:
        _id = cooldown_id_from_query(query)
        document = await self._collection.find_one({"_id": _id, "name": query.command_id})
        if document is None:
            return None

        return CooldownEntity(
            command_id=query.command_id,
            guild_id=query.guild_id,
            user_id=query.user_id,
            type=resolve_cooldown_type(document.get("type")),
            seconds_remaining=document.get("cooldown", 0),
        )

    async def save(self, cooldown: CooldownEntity) -> CooldownEntity:
        # Both calls raise on a bad scope before anything reaches the driver
        _id = cooldown_id_from_entity(cooldown)
        cooldown_type = resolve_cooldown_type(cooldown.type).value

        await self._collection.update_one(
            {"_id": _id, "name": cooldown.command_id, "type": cooldown_type},
            {
                "$set": {
                    "name": cooldown.command_id,
                    "type": cooldown_type,
                    "cooldown": cooldown.seconds_remaining,
                }
            },
            upsert=True,
        )
        logger.debug("[MONGO] Saved cooldown %s (%ss)", _id, cooldown.seconds_remaining)
        return cooldown

    async def delete(self, target: Union[CooldownQuery, CooldownEntity]) -> None:
        _id = cooldown_id_for(target)
        await self._collection.delete_one({"_id": _id, "name": target.command_id})
