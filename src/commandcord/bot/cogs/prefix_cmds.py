"""
Prefix cog: shows or changes the command prefix of the current server.

/prefix            -> reply with the current prefix
/prefix <prefix>   -> store a new prefix (Administrator only)

Setting a prefix needs a guild context and a connected database.
"""

import discord
from discord.ext import commands

from commandcord.core.framework import CommandFramework
from commandcord.errors import InvalidPrefixError
from commandcord.util.logger import get_logger

logger = get_logger("prefix_commands")


class PrefixCog(commands.Cog):
    """Display or set the prefix for the current guild."""

    def __init__(self, discord_bot_instance, framework: CommandFramework):
        self.discord_bot_instance = discord_bot_instance
        self.framework = framework
        logger.info("[PREFIX CMDS] Prefix cog loaded")

    def _has_admin_permission(self, ctx: discord.ApplicationContext) -> bool:
        permissions = getattr(ctx.user, "guild_permissions", None)
        return bool(permissions and permissions.administrator)

    @commands.slash_command(
        name="prefix",
        description="Displays or sets the prefix for the current guild",
    )
    async def prefix(self, ctx: discord.ApplicationContext, prefix: str = None):
        if not prefix:
            await ctx.respond(f'The current prefix is "{self.framework.get_prefix(ctx.guild)}"', ephemeral=True)
            return

        if ctx.guild is None:
            await ctx.respond("You cannot change the prefix in direct messages.", ephemeral=True)
            return

        if not self._has_admin_permission(ctx):
            await ctx.respond("You need the Administrator permission to do that.", ephemeral=True)
            return

        if not self.framework.is_db_connected():
            await ctx.respond("No database connection found.", ephemeral=True)
            return

        try:
            await self.framework.set_prefix(ctx.guild, prefix)
        except InvalidPrefixError:
            await ctx.respond("The prefix cannot be empty.", ephemeral=True)
            return

        await ctx.respond(f'Set the prefix for this server to "{prefix}"', ephemeral=True)


def setup(discord_bot_instance, framework: CommandFramework):
    discord_bot_instance.add_cog(PrefixCog(discord_bot_instance, framework))
