"""
MongoDB-backed guild settings repository.

One document per guild, keyed by the guild id:
    { _id: <guild id>, prefix: <prefix>, categories: {<name>: <emoji>}, language: <name or null> }
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument

from commandcord.datatypes.guild_settings import (
    DEFAULT_PREFIX,
    GuildPrefix,
    GuildSettingsAggregate,
)
from commandcord.repositories.guild_settings_repo import GuildSettingsRepository
from commandcord.util.logger import get_logger

logger = get_logger("mongo_guild_settings_repo")

GUILD_SETTINGS_COLLECTION = "guild-settings"


class MongoGuildSettingsRepository(GuildSettingsRepository):
    """GuildSettingsRepository over a motor collection."""

    def __init__(self, collection: AsyncIOMotorCollection, default_prefix: str = DEFAULT_PREFIX):
        self._collection = collection
        self._default_prefix = default_prefix

    async def find_one(self, guild_id: str) -> Optional[GuildSettingsAggregate]:
        document = await self._collection.find_one({"_id": guild_id})
        if document is None:
            return None
        return self._from_document(document)

    async def find_all(self) -> List[GuildSettingsAggregate]:
        documents = await self._collection.find({}).to_list(length=None)
        logger.debug("[MONGO] Loaded %d guild settings documents", len(documents))
        return [self._from_document(document) for document in documents]

    async def save(self, settings: GuildSettingsAggregate) -> GuildSettingsAggregate:
        document = await self._collection.find_one_and_update(
            {"_id": settings.guild_id},
            {"$set": self._to_document(settings)},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        if document is None:
            # Some drivers return nothing for a fresh upsert
            return settings
        return self._from_document(document)

    async def delete(self, guild_id: str) -> None:
        await self._collection.delete_one({"_id": guild_id})

    # ========== Document mapping ==========

    @staticmethod
    def _to_document(settings: GuildSettingsAggregate) -> Dict[str, Any]:
        return {
            "prefix": settings.prefix.value,
            "categories": dict(settings.categories),
            "language": settings.language,
        }

    def _from_document(self, document: Dict[str, Any]) -> GuildSettingsAggregate:
        return GuildSettingsAggregate(
            guild_id=str(document["_id"]),
            prefix=GuildPrefix(document.get("prefix") or self._default_prefix),
            categories=dict(document.get("categories") or {}),
            language=document.get("language"),
        )
