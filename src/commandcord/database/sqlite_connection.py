"""
SQLite connection management for the bundled caller-supplied backend.

SQLite performs best with one long-lived connection. Writes are serialised
with a semaphore so async tasks queue up instead of fighting SQLite's busy
timeout; reads share the connection directly (WAL mode).

Usage
-----
    manager = SqliteConnectionManager()
    await manager.open(Path("data/commandcord.db"))

    async with manager.read() as conn:
        cursor = await conn.execute("SELECT ...")

    async with manager.transaction() as conn:
        await conn.execute("INSERT ...")
        # commits on clean exit, rolls back on exception

    await manager.close()
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from commandcord.datatypes.db_datatypes import DbConnectionStatus
from commandcord.util.logger import get_logger

logger = get_logger("sqlite_connection")

_PRAGMAS = [
    "PRAGMA journal_mode = WAL",
    "PRAGMA synchronous = NORMAL",
    "PRAGMA temp_store = MEMORY",
]

_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS guild_settings (
        guild_id TEXT PRIMARY KEY,
        prefix TEXT NOT NULL,
        categories TEXT NOT NULL DEFAULT '{}',
        language TEXT,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS cooldowns (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        type TEXT NOT NULL,
        cooldown REAL NOT NULL
    )
    """,
]


class SqliteConnectionManager:
    """
    Wrapper around a single aiosqlite connection.

    Exposes the connectivity checks a GenericStrategy needs
    (is_connected / connection_status) alongside the connection itself.
    """

    def __init__(self) -> None:
        self._conn: aiosqlite.Connection | None = None
        self._write_sem = asyncio.Semaphore(1)
        self._status = DbConnectionStatus.DISCONNECTED

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self, path: Path | str) -> None:
        """Open the database, apply pragmas and create the tables."""
        if self._conn is not None:
            logger.warning("[SQLITE] open() called but connection already exists, ignoring")
            return

        self._status = DbConnectionStatus.CONNECTING
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(path)
        self._conn.row_factory = aiosqlite.Row

        for pragma in _PRAGMAS:
            await self._conn.execute(pragma)
        for statement in _SCHEMA:
            await self._conn.execute(statement)
        await self._conn.commit()

        self._status = DbConnectionStatus.CONNECTED
        logger.info("[SQLITE] Opened connection to %s", path)

    async def close(self) -> None:
        if self._conn is None:
            return

        self._status = DbConnectionStatus.DISCONNECTING
        try:
            await self._conn.close()
        finally:
            self._conn = None
            self._status = DbConnectionStatus.DISCONNECTED
            logger.info("[SQLITE] Connection closed")

    # ------------------------------------------------------------------
    # Connectivity
    # ------------------------------------------------------------------

    def is_connected(self) -> bool:
        return self._conn is not None and self._status is DbConnectionStatus.CONNECTED

    def connection_status(self) -> DbConnectionStatus:
        return self._status

    # ------------------------------------------------------------------
    # Connection access
    # ------------------------------------------------------------------

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError(
                "SQLite connection is not open. Call await manager.open(path) at startup."
            )
        return self._conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Serialised write transaction: commit on success, roll back on error."""
        conn = self.connection

        async with self._write_sem:
            try:
                yield conn
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise

    @asynccontextmanager
    async def read(self) -> AsyncIterator[aiosqlite.Connection]:
        yield self.connection
