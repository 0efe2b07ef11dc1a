"""
MongoDB connection management.

Wraps a single AsyncIOMotorClient for the bot lifecycle and reports a
driver-style ready state so the framework can gate storage access:

    0 = disconnected, 1 = connected, 2 = connecting, 3 = disconnecting

Usage
-----
    connection = MongoConnection("mongodb://localhost:27017/bot")
    await connection.open()
    settings = connection.database["guild-settings"]
    ...
    await connection.close()
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from commandcord.util.logger import get_logger

logger = get_logger("mongo_connection")

DEFAULT_DATABASE_NAME = "commandcord"

DISCONNECTED = 0
CONNECTED = 1
CONNECTING = 2
DISCONNECTING = 3


class MongoConnection:
    """
    Owner of the motor client used by the built-in persistence strategy.

    Args:
        uri: MongoDB connection string.
        options: Extra keyword arguments forwarded to the motor client.
        client_factory: Callable building the client (swapped out in tests).
    """

    def __init__(
        self,
        uri: str,
        options: Optional[Dict[str, Any]] = None,
        client_factory: Callable[..., AsyncIOMotorClient] = AsyncIOMotorClient,
    ) -> None:
        self._uri = uri
        self._options = dict(options or {})
        self._client_factory = client_factory
        self._client: AsyncIOMotorClient | None = None
        self._ready_state = DISCONNECTED

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """
        Create the client and confirm the server answers a ping.

        A failed ping is logged and leaves the connection DISCONNECTED; the
        caller decides whether that is fatal.
        """
        if self._client is not None:
            logger.warning("[MONGO] open() called but client already exists, ignoring")
            return

        self._ready_state = CONNECTING
        self._client = self._client_factory(self._uri, **self._options)

        try:
            await self._client.admin.command("ping")
        except PyMongoError as exc:
            self._ready_state = DISCONNECTED
            logger.error("[MONGO] Could not reach MongoDB: %s", exc)
            return

        self._ready_state = CONNECTED
        logger.info("[MONGO] Connected to database '%s'", self.database.name)

    async def close(self) -> None:
        if self._client is None:
            return

        self._ready_state = DISCONNECTING
        try:
            self._client.close()
        finally:
            self._client = None
            self._ready_state = DISCONNECTED
            logger.info("[MONGO] Connection closed")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def ready_state(self) -> int:
        """
        Current state. Once open, CONNECTED follows the driver's topology: it
        drops to DISCONNECTED while no writable server is known and comes back
        when the monitor finds one again.
        """
        if self._ready_state != CONNECTED or self._client is None:
            return self._ready_state
        if self._client.topology_description.has_writable_server():
            return CONNECTED
        return DISCONNECTED

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """The database named in the URI, or DEFAULT_DATABASE_NAME."""
        if self._client is None:
            raise RuntimeError("MongoConnection.open() has not been called")
        return self._client.get_default_database(default=DEFAULT_DATABASE_NAME)
