"""
Commandcord - per-guild settings and cooldowns for Discord command bots

Commandcord sits between a command dispatcher and a pluggable persistence
backend:

- **Guild Settings**: per-server prefix and help-category emoji, cached in
  memory and persisted on change
- **Cooldowns**: global and per-user command throttling, with long cooldowns
  stored so they survive restarts
- **Persistence Strategies**: built-in MongoDB (motor) or any caller-supplied
  repositories, chosen once at start-up

Usage:
    from commandcord import CommandFramework, FrameworkOptions, MongoDatabaseOptions

    framework = CommandFramework(bot, FrameworkOptions(database=MongoDatabaseOptions(uri)))
    await framework.setup()
"""

from commandcord.configuration.options import (
    CategorySetting,
    FrameworkOptions,
    GenericDatabaseOptions,
    MongoDatabaseOptions,
)
from commandcord.core.framework import CommandFramework, FrameworkEvent

__all__ = [
    "CategorySetting",
    "CommandFramework",
    "FrameworkEvent",
    "FrameworkOptions",
    "GenericDatabaseOptions",
    "MongoDatabaseOptions",
]
