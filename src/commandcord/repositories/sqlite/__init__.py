"""SQLite (aiosqlite) implementations of the repositories."""
from commandcord.repositories.sqlite.cooldown_repo import SqliteCooldownRepository
from commandcord.repositories.sqlite.guild_settings_repo import SqliteGuildSettingsRepository

__all__ = [
    "SqliteCooldownRepository",
    "SqliteGuildSettingsRepository",
]
