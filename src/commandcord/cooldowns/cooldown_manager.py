"""
Cooldown enforcement for commands.

Active cooldowns live in memory, keyed by the same identity the repositories
use. Cooldowns of PERSIST_THRESHOLD_SECONDS or longer are also written to the
cooldown repository so they survive a restart; the first time a key misses in
memory the repository is asked once for a stored counter.

Durations are written as "<number><unit>" with unit s, m, h or d ("2s", "5m").
"""

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Set, Union

from commandcord.datatypes.cooldown_datatypes import (
    CooldownEntity,
    CooldownQuery,
    CooldownType,
    resolve_cooldown_type,
)
from commandcord.errors import InvalidCooldownError
from commandcord.repositories.cooldown_repo import cooldown_id_from_entity
from commandcord.util.logger import get_logger

logger = get_logger("cooldown_manager")

DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$")
UNIT_SECONDS = {"s": 1, "m": 60, "h": 60 * 60, "d": 60 * 60 * 24}

MIN_GLOBAL_COOLDOWN_SECONDS = 60
PERSIST_THRESHOLD_SECONDS = 5 * 60


def parse_cooldown(value: Union[str, int, float]) -> int:
    """
    Convert a cooldown duration into whole seconds.

    Raises:
        InvalidCooldownError: For anything other than a positive number or "<n>[smhd]".
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = int(value)
    else:
        match = DURATION_PATTERN.match(str(value).strip().lower())
        if match is None:
            raise InvalidCooldownError(
                f"Invalid cooldown format {value!r}; use a number followed by s, m, h or d (e.g. '5m')"
            )
        seconds = int(match.group(1)) * UNIT_SECONDS[match.group(2)]

    if seconds <= 0:
        raise InvalidCooldownError(f"Cooldown must be positive, got {value!r}")
    return seconds


def format_remaining(seconds: float) -> str:
    """Render seconds as '1d 2h 3m 4s', omitting zero units."""
    total = max(0, math.ceil(seconds))
    days, total = divmod(total, UNIT_SECONDS["d"])
    hours, total = divmod(total, UNIT_SECONDS["h"])
    minutes, secs = divmod(total, UNIT_SECONDS["m"])

    parts = [f"{value}{unit}" for value, unit in ((days, "d"), (hours, "h"), (minutes, "m"), (secs, "s")) if value]
    return " ".join(parts) or "0s"


@dataclass(slots=True)
class _ActiveCooldown:
    entity: CooldownEntity
    expires_at: float


class CooldownManager:
    """
    Tracks active cooldowns and mirrors long ones into the cooldown repository.

    Args:
        framework: The CommandFramework whose connectivity check and repository are used.
        clock: Monotonic clock in seconds (overridable in tests).
    """

    def __init__(self, framework, clock: Callable[[], float] = time.monotonic) -> None:
        self._framework = framework
        self._clock = clock
        self._active: Dict[str, _ActiveCooldown] = {}
        self._persisted: Set[str] = set()
        self._looked_up: Set[str] = set()

    # ========== Public API ==========

    async def set_cooldown(
        self,
        command_id: str,
        guild_id: str,
        duration: Union[str, int, float],
        user_id: Optional[str] = None,
        cooldown_type: Union[CooldownType, str] = CooldownType.PER_USER,
    ) -> CooldownEntity:
        """Start (or restart) a cooldown and persist it when it is long enough."""
        seconds = parse_cooldown(duration)
        entity = self._entity(command_id, guild_id, user_id, cooldown_type)
        if entity.type is CooldownType.GLOBAL and seconds < MIN_GLOBAL_COOLDOWN_SECONDS:
            raise InvalidCooldownError(
                f"Global cooldown for '{command_id}' must be at least {MIN_GLOBAL_COOLDOWN_SECONDS}s"
            )

        entity.seconds_remaining = seconds
        key = cooldown_id_from_entity(entity)
        self._active[key] = _ActiveCooldown(entity, self._clock() + seconds)
        self._looked_up.add(key)

        if seconds >= PERSIST_THRESHOLD_SECONDS and self._framework.is_db_connected():
            await self._framework.cooldown_repository.save(entity)
            self._persisted.add(key)

        logger.debug("[COOLDOWNS] %s on cooldown for %ss", key, seconds)
        return entity

    async def get_remaining(
        self,
        command_id: str,
        guild_id: str,
        user_id: Optional[str] = None,
        cooldown_type: Union[CooldownType, str] = CooldownType.PER_USER,
    ) -> float:
        """Seconds left on a cooldown, 0 when none is active."""
        entity = self._entity(command_id, guild_id, user_id, cooldown_type)
        key = cooldown_id_from_entity(entity)

        active = self._active.get(key)
        if active is None:
            active = await self._load(entity, key)
            if active is None:
                return 0

        remaining = active.expires_at - self._clock()
        if remaining <= 0:
            await self._expire(key)
            return 0
        return remaining

    async def is_on_cooldown(
        self,
        command_id: str,
        guild_id: str,
        user_id: Optional[str] = None,
        cooldown_type: Union[CooldownType, str] = CooldownType.PER_USER,
    ) -> bool:
        return await self.get_remaining(command_id, guild_id, user_id, cooldown_type) > 0

    async def cancel_cooldown(
        self,
        command_id: str,
        guild_id: str,
        user_id: Optional[str] = None,
        cooldown_type: Union[CooldownType, str] = CooldownType.PER_USER,
    ) -> None:
        """Clear a cooldown from memory and from storage."""
        entity = self._entity(command_id, guild_id, user_id, cooldown_type)
        key = cooldown_id_from_entity(entity)
        self._active.pop(key, None)
        self._looked_up.add(key)
        self._persisted.discard(key)

        if self._framework.is_db_connected():
            await self._framework.cooldown_repository.delete(entity)

    async def sync(self) -> int:
        """
        Write the remaining time of every persisted cooldown back to storage.

        Expired cooldowns are deleted instead, and expired in-memory entries are
        dropped whether or not a database is connected. Returns the number of
        records written.
        """
        written = 0
        if self._framework.is_db_connected():
            repository = self._framework.cooldown_repository
            for key in list(self._persisted):
                active = self._active.get(key)
                remaining = active.expires_at - self._clock() if active else 0
                if remaining <= 0:
                    await self._expire(key)
                    continue

                active.entity.seconds_remaining = math.ceil(remaining)
                await repository.save(active.entity)
                written += 1

        self._evict_expired()
        return written

    @property
    def active_count(self) -> int:
        return len(self._active)

    # ========== Private Methods ==========

    @staticmethod
    def _entity(
        command_id: str,
        guild_id: str,
        user_id: Optional[str],
        cooldown_type: Union[CooldownType, str],
    ) -> CooldownEntity:
        cooldown_type = resolve_cooldown_type(cooldown_type)
        return CooldownEntity(
            command_id=command_id,
            guild_id=str(guild_id),
            user_id=str(user_id) if user_id is not None and cooldown_type is CooldownType.PER_USER else None,
            type=cooldown_type,
        )

    async def _load(self, entity: CooldownEntity, key: str) -> Optional[_ActiveCooldown]:
        if key in self._looked_up or not self._framework.is_db_connected():
            return None

        self._looked_up.add(key)
        stored = await self._framework.cooldown_repository.find_one(CooldownQuery.for_entity(entity))
        if stored is None:
            return None

        active = _ActiveCooldown(stored, self._clock() + float(stored.seconds_remaining))
        self._active[key] = active
        self._persisted.add(key)
        logger.debug("[COOLDOWNS] Restored %s from storage (%ss)", key, stored.seconds_remaining)
        return active

    async def _expire(self, key: str) -> None:
        active = self._active.pop(key, None)
        if key not in self._persisted:
            return

        self._persisted.discard(key)
        if active is not None and self._framework.is_db_connected():
            await self._framework.cooldown_repository.delete(active.entity)

    def _evict_expired(self) -> None:
        # Persisted keys stay until storage can be told about them
        now = self._clock()
        for key, active in list(self._active.items()):
            if key not in self._persisted and active.expires_at <= now:
                del self._active[key]
        self._looked_up.intersection_update(self._active)
