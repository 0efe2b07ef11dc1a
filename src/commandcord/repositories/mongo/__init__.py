"""MongoDB (motor) implementations of the repositories."""
from commandcord.repositories.mongo.cooldown_repo import MongoCooldownRepository
from commandcord.repositories.mongo.guild_settings_repo import MongoGuildSettingsRepository

__all__ = [
    "MongoCooldownRepository",
    "MongoGuildSettingsRepository",
]
