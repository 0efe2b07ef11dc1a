"""Tests for MongoConnection ready-state tracking."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from commandcord.database.mongo_connection import (
    CONNECTED,
    DEFAULT_DATABASE_NAME,
    DISCONNECTED,
    MongoConnection,
)


def make_client(ping_error=None):
    client = MagicMock()
    client.admin.command = AsyncMock(side_effect=ping_error)
    return client


@pytest.mark.asyncio
async def test_open_pings_and_marks_connected():
    client = make_client()
    factory = MagicMock(return_value=client)
    connection = MongoConnection("mongodb://db/bot", {"serverSelectionTimeoutMS": 500}, client_factory=factory)

    assert connection.ready_state == DISCONNECTED
    await connection.open()

    factory.assert_called_once_with("mongodb://db/bot", serverSelectionTimeoutMS=500)
    client.admin.command.assert_awaited_once_with("ping")
    assert connection.ready_state == CONNECTED
    assert connection.database is client.get_default_database.return_value
    client.get_default_database.assert_called_with(default=DEFAULT_DATABASE_NAME)


@pytest.mark.asyncio
async def test_failed_ping_leaves_disconnected():
    client = make_client(ping_error=ServerSelectionTimeoutError("no servers"))
    connection = MongoConnection("mongodb://db/bot", client_factory=MagicMock(return_value=client))

    await connection.open()

    assert connection.ready_state == DISCONNECTED


@pytest.mark.asyncio
async def test_open_twice_keeps_first_client():
    factory = MagicMock(return_value=make_client())
    connection = MongoConnection("mongodb://db/bot", client_factory=factory)

    await connection.open()
    await connection.open()

    factory.assert_called_once()


@pytest.mark.asyncio
async def test_close_releases_client():
    client = make_client()
    connection = MongoConnection("mongodb://db/bot", client_factory=MagicMock(return_value=client))
    await connection.open()

    await connection.close()

    client.close.assert_called_once()
    assert connection.ready_state == DISCONNECTED
    with pytest.raises(RuntimeError):
        connection.database

    # closing again is harmless
    await connection.close()


@pytest.mark.asyncio
async def test_ready_state_follows_server_availability():
    client = make_client()
    connection = MongoConnection("mongodb://db/bot", client_factory=MagicMock(return_value=client))
    await connection.open()

    client.topology_description.has_writable_server.return_value = False
    assert connection.ready_state == DISCONNECTED

    client.topology_description.has_writable_server.return_value = True
    assert connection.ready_state == CONNECTED
