import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from commandcord.bot.cogs import language_cmds
from commandcord.core.framework import CommandFramework, FrameworkEvent
from commandcord.configuration.options import FrameworkOptions
from commandcord.persistence.strategy import GenericStrategy


def make_framework(guild_repo, cooldown_repo, db_state):
    strategy = GenericStrategy(lambda: db_state.connected, guild_repo, cooldown_repo)
    return CommandFramework(
        SimpleNamespace(),
        FrameworkOptions(supported_languages=["english", "spanish"]),
        strategy=strategy,
    )


def make_ctx(guild_id=10, administrator=True):
    guild = SimpleNamespace(id=guild_id) if guild_id is not None else None
    return SimpleNamespace(
        guild=guild,
        user=SimpleNamespace(guild_permissions=SimpleNamespace(administrator=administrator)),
        respond=AsyncMock(),
    )


async def invoke(cog, ctx, language=None):
    cb = getattr(language_cmds.LanguageCog.language, "callback", None)
    assert cb is not None
    await cb(cog, ctx, language)


def test_setup_adds_cog(guild_repo, cooldown_repo, db_state):
    captured = {}

    def fake_add_cog(cog):
        captured["cog"] = cog

    framework = make_framework(guild_repo, cooldown_repo, db_state)
    language_cmds.setup(SimpleNamespace(add_cog=fake_add_cog), framework)

    assert isinstance(captured["cog"], language_cmds.LanguageCog)
    assert captured["cog"].framework is framework


@pytest.mark.asyncio
async def test_shows_current_language(guild_repo, cooldown_repo, db_state):
    cog = language_cmds.LanguageCog(SimpleNamespace(), make_framework(guild_repo, cooldown_repo, db_state))
    ctx = make_ctx()

    await invoke(cog, ctx)

    ctx.respond.assert_awaited_once_with('The current language is "english"', ephemeral=True)


@pytest.mark.asyncio
async def test_sets_language(guild_repo, cooldown_repo, db_state):
    framework = make_framework(guild_repo, cooldown_repo, db_state)
    cog = language_cmds.LanguageCog(SimpleNamespace(), framework)
    ctx = make_ctx()

    await invoke(cog, ctx, "SPANISH")

    ctx.respond.assert_awaited_once_with('Set the language for this server to "spanish"', ephemeral=True)
    assert framework.get_language("10") == "spanish"
    assert guild_repo.documents["10"].language == "spanish"


@pytest.mark.asyncio
async def test_unsupported_language_rejected_and_reported(guild_repo, cooldown_repo, db_state):
    framework = make_framework(guild_repo, cooldown_repo, db_state)
    rejected = []
    framework.on(FrameworkEvent.LANGUAGE_NOT_SUPPORTED, lambda guild, language: rejected.append(language))
    cog = language_cmds.LanguageCog(SimpleNamespace(), framework)
    ctx = make_ctx()

    await invoke(cog, ctx, "Klingon")

    ctx.respond.assert_awaited_once_with(
        'The language "klingon" is not supported. Available: english, spanish', ephemeral=True
    )
    assert rejected == ["klingon"]
    assert guild_repo.documents == {}


@pytest.mark.asyncio
async def test_requires_administrator(guild_repo, cooldown_repo, db_state):
    framework = make_framework(guild_repo, cooldown_repo, db_state)
    cog = language_cmds.LanguageCog(SimpleNamespace(), framework)
    ctx = make_ctx(administrator=False)

    await invoke(cog, ctx, "spanish")

    ctx.respond.assert_awaited_once_with("You need the Administrator permission to do that.", ephemeral=True)
    assert guild_repo.calls == []


@pytest.mark.asyncio
async def test_direct_messages_refused(guild_repo, cooldown_repo, db_state):
    cog = language_cmds.LanguageCog(SimpleNamespace(), make_framework(guild_repo, cooldown_repo, db_state))
    ctx = make_ctx(guild_id=None)

    await invoke(cog, ctx, "spanish")

    ctx.respond.assert_awaited_once_with("Languages can only be set inside a server.", ephemeral=True)


@pytest.mark.asyncio
async def test_without_database(guild_repo, cooldown_repo, db_state):
    db_state.connected = False
    cog = language_cmds.LanguageCog(SimpleNamespace(), make_framework(guild_repo, cooldown_repo, db_state))
    ctx = make_ctx()

    await invoke(cog, ctx, "spanish")

    ctx.respond.assert_awaited_once_with("No database connection found.", ephemeral=True)
    assert guild_repo.calls == []
