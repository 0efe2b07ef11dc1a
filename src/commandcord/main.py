"""
Commandcord example bot
=======================

Starts a py-cord bot with the command framework attached: guild prefixes and
cooldowns backed by MongoDB when ``MONGO_URI`` (or ``database.mongo_uri`` in
``config/app_config.yml``) is set, in-memory otherwise.
"""

import asyncio
import os
import sys
from pathlib import Path

import discord
from dotenv import load_dotenv

from commandcord.configuration.app_configuration import app_config
from commandcord.core.framework import CommandFramework
from commandcord.errors import ConfigurationError, DatabaseNotConnectedError
from commandcord.util.logger import get_logger, handle_exception

logger = get_logger("main")

BASE_DIR = Path(os.getenv("COMMANDCORD_HOME", Path.cwd())).resolve()


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.guilds = True
    intents.messages = True
    intents.message_content = True
    return intents


def load_cogs(bot: discord.Bot, framework: CommandFramework) -> None:
    """Register the framework's cogs with the bot."""
    from commandcord.bot.cogs import events_listener, language_cmds, prefix_cmds

    prefix_cmds.setup(bot, framework)
    language_cmds.setup(bot, framework)
    events_listener.setup(bot, framework)
    logger.info("All cogs loaded successfully.")


async def async_main() -> int:
    """Bootstrap the framework and the bot, returning an exit code.

    The framework is shut down on every exit path, including driver errors
    raised while warming the settings cache.
    """
    token = load_environment()
    bot = discord.Bot(intents=build_intents())

    # Re-read now that .env may have provided MONGO_URI
    app_config.reload()
    framework = CommandFramework(bot, app_config.to_framework_options())

    try:
        try:
            await framework.setup()
        except (ConfigurationError, DatabaseNotConnectedError) as exc:
            logger.critical("Failed to initialize command framework: %s", exc)
            return 1

        load_cogs(bot, framework)

        try:
            await bot.start(token)
        except asyncio.CancelledError:
            logger.info("Discord bot start cancelled; shutting down")
        finally:
            if not bot.is_closed():
                await bot.close()
    finally:
        await framework.shutdown()

    return 0


def main() -> int:
    """Console entry point."""
    sys.excepthook = handle_exception
    logger.info("Starting Commandcord bot…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
