"""Event listener Cog for Commandcord.

Keeps the guild settings store in step with the bot's guild membership:
settings are dropped when the bot leaves a server.
"""

import discord
from discord.ext import commands

from commandcord.core.framework import CommandFramework
from commandcord.errors import PersistenceError
from commandcord.util.logger import get_logger

logger = get_logger("events_listener")


class EventsListenerCog(commands.Cog):
    """Handles Discord guild lifecycle events."""

    def __init__(self, bot: discord.Bot, framework: CommandFramework) -> None:
        self.bot = bot
        self.framework = framework
        logger.info("[EVENTS LISTENER] Events listener cog loaded")

    @commands.Cog.listener(name="on_guild_remove")
    async def on_guild_remove(self, guild: discord.Guild) -> None:
        """Delete stored settings when the bot leaves a server."""
        logger.debug("[EVENTS LISTENER] Bot removed from guild: %s (ID: %s)", guild.name, guild.id)

        if not self.framework.is_db_connected():
            return

        try:
            await self.framework.remove_guild_settings(guild)
        except PersistenceError as exc:
            logger.error("[EVENTS LISTENER] Failed to remove settings for guild %s: %s", guild.id, exc)


def setup(bot: discord.Bot, framework: CommandFramework) -> None:
    """Register the EventsListenerCog with the bot."""
    bot.add_cog(EventsListenerCog(bot, framework))
