"""Repository layer for guild settings and cooldown storage."""
from commandcord.repositories.cooldown_repo import CooldownRepository
from commandcord.repositories.guild_settings_repo import GuildSettingsRepository

__all__ = [
    "CooldownRepository",
    "GuildSettingsRepository",
]
