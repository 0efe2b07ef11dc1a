"""
Pytest configuration and fixtures for Commandcord tests.
"""

import os
import sys
import tempfile
from pathlib import Path

# Keep test runs from writing session logs into the repository
os.environ.setdefault("COMMANDCORD_LOGS_DIR", tempfile.mkdtemp(prefix="commandcord-logs-"))

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest

from commandcord.configuration.options import FrameworkOptions, GenericDatabaseOptions
from commandcord.datatypes.cooldown_datatypes import CooldownEntity, CooldownQuery
from commandcord.datatypes.db_datatypes import DbConnectionStatus
from commandcord.datatypes.guild_settings import GuildSettingsAggregate
from commandcord.repositories.cooldown_repo import (
    CooldownRepository,
    cooldown_id_for,
    cooldown_id_from_entity,
    cooldown_id_from_query,
)
from commandcord.repositories.guild_settings_repo import GuildSettingsRepository


class InMemoryGuildSettingsRepository(GuildSettingsRepository):
    """Dict-backed repository that records every call."""

    def __init__(self, stored: Optional[List[GuildSettingsAggregate]] = None):
        self.documents: Dict[str, GuildSettingsAggregate] = {s.guild_id: s for s in stored or []}
        self.calls: List[tuple] = []

    async def find_one(self, guild_id):
        self.calls.append(("find_one", guild_id))
        stored = self.documents.get(guild_id)
        return stored.copy() if stored else None

    async def find_all(self):
        self.calls.append(("find_all",))
        return [s.copy() for s in self.documents.values()]

    async def save(self, settings):
        self.calls.append(("save", settings.guild_id))
        self.documents[settings.guild_id] = settings.copy()
        return settings.copy()

    async def delete(self, guild_id):
        self.calls.append(("delete", guild_id))
        self.documents.pop(guild_id, None)


class InMemoryCooldownRepository(CooldownRepository):
    """Dict-backed cooldown repository keyed by the derived identity."""

    def __init__(self):
        self.documents: Dict[str, dict] = {}
        self.calls: List[tuple] = []

    async def find_one(self, query: CooldownQuery):
        self.calls.append(("find_one", cooldown_id_from_query(query)))
        document = self.documents.get(cooldown_id_from_query(query))
        if document is None:
            return None
        return CooldownEntity(
            command_id=query.command_id,
            guild_id=query.guild_id,
            user_id=query.user_id,
            type=document["type"],
            seconds_remaining=document["cooldown"],
        )

    async def save(self, cooldown: CooldownEntity):
        _id = cooldown_id_from_entity(cooldown)
        self.calls.append(("save", _id))
        self.documents[_id] = {"name": cooldown.command_id, "type": str(cooldown.type), "cooldown": cooldown.seconds_remaining}
        return cooldown

    async def delete(self, target):
        _id = cooldown_id_for(target)
        self.calls.append(("delete", _id))
        self.documents.pop(_id, None)


@pytest.fixture()
def guild_repo():
    return InMemoryGuildSettingsRepository()


@pytest.fixture()
def cooldown_repo():
    return InMemoryCooldownRepository()


@pytest.fixture()
def db_state():
    """Mutable connectivity flag shared with a GenericDatabaseOptions check."""
    return SimpleNamespace(connected=True)


@pytest.fixture()
def generic_options(guild_repo, cooldown_repo, db_state):
    return FrameworkOptions(
        database=GenericDatabaseOptions(
            is_db_connected=lambda: db_state.connected,
            get_db_connection_status=lambda: (
                DbConnectionStatus.CONNECTED if db_state.connected else DbConnectionStatus.DISCONNECTED
            ),
            guild_settings_repository=guild_repo,
            cooldown_repository=cooldown_repo,
        )
    )


@pytest.fixture()
def fake_client():
    emojis = {}
    return SimpleNamespace(emojis=emojis, get_emoji=lambda emoji_id: emojis.get(emoji_id))
