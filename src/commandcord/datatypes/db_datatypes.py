"""
Enumerations describing the persistence backend.
"""

from __future__ import annotations

from enum import Enum


class DbConnectionStrategy(Enum):
    """Which persistence strategy the framework was configured with."""

    MONGO = "mongo"
    GENERIC = "generic"

    def __str__(self) -> str:
        return self.value


class DbConnectionStatus(Enum):
    """Connection state reported by the active persistence strategy."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    CONNECTING = "connecting"
    DISCONNECTING = "disconnecting"
    UNKNOWN = "unknown"
    NO_DATABASE = "no_database"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_ready_state(cls, ready_state: int | None) -> DbConnectionStatus:
        """Map a driver ready-state code (0-3) onto a status, UNKNOWN otherwise."""
        return READY_STATES.get(ready_state, cls.UNKNOWN)


READY_STATES = {
    0: DbConnectionStatus.DISCONNECTED,
    1: DbConnectionStatus.CONNECTED,
    2: DbConnectionStatus.CONNECTING,
    3: DbConnectionStatus.DISCONNECTING,
}
