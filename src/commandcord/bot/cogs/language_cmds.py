"""
Language cog: shows or changes the reply language of the current server.

/language              -> reply with the current language
/language <language>   -> store a new language (Administrator only)
"""

import discord
from discord.ext import commands

from commandcord.core.framework import CommandFramework
from commandcord.errors import UnsupportedLanguageError
from commandcord.util.logger import get_logger

logger = get_logger("language_commands")


class LanguageCog(commands.Cog):
    """Display or set the language for the current guild."""

    def __init__(self, discord_bot_instance, framework: CommandFramework):
        self.discord_bot_instance = discord_bot_instance
        self.framework = framework
        logger.info("[LANGUAGE CMDS] Language cog loaded")

    def _has_admin_permission(self, ctx: discord.ApplicationContext) -> bool:
        permissions = getattr(ctx.user, "guild_permissions", None)
        return bool(permissions and permissions.administrator)

    @commands.slash_command(
        name="language",
        description="Displays or sets the language for the current guild",
    )
    async def language(self, ctx: discord.ApplicationContext, language: str = None):
        if ctx.guild is None:
            await ctx.respond("Languages can only be set inside a server.", ephemeral=True)
            return

        if not self.framework.is_db_connected():
            await ctx.respond("No database connection found.", ephemeral=True)
            return

        if not language:
            await ctx.respond(f'The current language is "{self.framework.get_language(ctx.guild)}"', ephemeral=True)
            return

        if not self._has_admin_permission(ctx):
            await ctx.respond("You need the Administrator permission to do that.", ephemeral=True)
            return

        try:
            chosen = await self.framework.set_language(ctx.guild, language)
        except UnsupportedLanguageError as exc:
            supported = ", ".join(self.framework.supported_languages)
            await ctx.respond(
                f'The language "{exc.language}" is not supported. Available: {supported}',
                ephemeral=True,
            )
            return

        await ctx.respond(f'Set the language for this server to "{chosen}"', ephemeral=True)


def setup(discord_bot_instance, framework: CommandFramework):
    discord_bot_instance.add_cog(LanguageCog(discord_bot_instance, framework))
