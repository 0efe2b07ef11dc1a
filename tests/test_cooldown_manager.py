"""Tests for cooldown parsing, enforcement and persistence."""

from types import SimpleNamespace

import pytest

from commandcord.cooldowns.cooldown_manager import (
    CooldownManager,
    format_remaining,
    parse_cooldown,
)
from commandcord.errors import (
    InvalidCooldownError,
    OperationNotImplementedError,
    UnrecognizedCooldownScopeError,
)
from commandcord.repositories.cooldown_repo import CooldownRepository


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def framework(cooldown_repo, db_state):
    return SimpleNamespace(
        is_db_connected=lambda: db_state.connected,
        cooldown_repository=cooldown_repo,
    )


@pytest.fixture()
def manager(framework, clock):
    return CooldownManager(framework, clock=clock)


@pytest.mark.parametrize(
    "value, expected",
    [("2s", 2), ("5m", 300), ("1h", 3600), ("2d", 172800), (" 10M ", 600), (45, 45), (1.9, 1)],
)
def test_parse_cooldown(value, expected):
    assert parse_cooldown(value) == expected


@pytest.mark.parametrize("value", ["5", "m", "5w", "-5s", "0s", "", 0, -3, True])
def test_parse_cooldown_rejects_malformed(value):
    with pytest.raises(InvalidCooldownError):
        parse_cooldown(value)


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0s"), (-4, "0s"), (4, "4s"), (59.2, "1m"), (3600, "1h"), (93784, "1d 2h 3m 4s")],
)
def test_format_remaining(seconds, expected):
    assert format_remaining(seconds) == expected


class TestCooldownManager:
    """Tests for CooldownManager."""

    @pytest.mark.asyncio
    async def test_short_cooldown_stays_in_memory(self, manager, clock, cooldown_repo):
        await manager.set_cooldown("ping", "g1", "30s", user_id="u1")

        assert await manager.is_on_cooldown("ping", "g1", "u1")
        assert not await manager.is_on_cooldown("ping", "g1", "u2")
        assert cooldown_repo.calls == []

        clock.advance(31)
        assert await manager.get_remaining("ping", "g1", "u1") == 0
        assert manager.active_count == 0

    @pytest.mark.asyncio
    async def test_long_cooldown_is_persisted(self, manager, cooldown_repo):
        entity = await manager.set_cooldown("ban", "g1", "10m", user_id="u1")

        assert entity.seconds_remaining == 600
        assert cooldown_repo.calls == [("save", "ban-g1-u1")]
        assert cooldown_repo.documents["ban-g1-u1"] == {"name": "ban", "type": "per-user", "cooldown": 600}

    @pytest.mark.asyncio
    async def test_long_cooldown_without_database_is_memory_only(self, manager, cooldown_repo, db_state):
        db_state.connected = False

        await manager.set_cooldown("ban", "g1", "10m", user_id="u1")

        assert await manager.is_on_cooldown("ban", "g1", "u1")
        assert cooldown_repo.calls == []

    @pytest.mark.asyncio
    async def test_global_cooldown_minimum(self, manager):
        with pytest.raises(InvalidCooldownError):
            await manager.set_cooldown("ban", "g1", "30s", cooldown_type="global")

        await manager.set_cooldown("ban", "g1", "1m", cooldown_type="global")
        assert manager.active_count == 1

    @pytest.mark.asyncio
    async def test_global_cooldown_applies_to_every_user(self, manager):
        await manager.set_cooldown("ban", "g1", "2m", user_id="u1", cooldown_type="global")

        assert await manager.is_on_cooldown("ban", "g1", "u2", cooldown_type="global")
        assert not await manager.is_on_cooldown("ban", "g2", "u1", cooldown_type="global")

    @pytest.mark.asyncio
    async def test_unknown_scope_rejected(self, manager):
        with pytest.raises(UnrecognizedCooldownScopeError):
            await manager.set_cooldown("ban", "g1", "1m", user_id="u1", cooldown_type="channel")

    @pytest.mark.asyncio
    async def test_stored_cooldown_restored_once(self, manager, cooldown_repo):
        cooldown_repo.documents["ban-g1-u1"] = {"name": "ban", "type": "per-user", "cooldown": 120}

        assert await manager.get_remaining("ban", "g1", "u1") == 120
        assert await manager.get_remaining("ban", "g1", "u1") == 120
        assert cooldown_repo.calls == [("find_one", "ban-g1-u1")]

    @pytest.mark.asyncio
    async def test_missing_cooldown_looked_up_once(self, manager, cooldown_repo):
        assert not await manager.is_on_cooldown("kick", "g1", "u1")
        assert not await manager.is_on_cooldown("kick", "g1", "u1")
        assert cooldown_repo.calls == [("find_one", "kick-g1-u1")]

    @pytest.mark.asyncio
    async def test_expired_persisted_cooldown_is_deleted(self, manager, clock, cooldown_repo):
        await manager.set_cooldown("ban", "g1", "10m", user_id="u1")
        clock.advance(601)

        assert await manager.get_remaining("ban", "g1", "u1") == 0
        assert ("delete", "ban-g1-u1") in cooldown_repo.calls
        assert cooldown_repo.documents == {}

    @pytest.mark.asyncio
    async def test_cancel_cooldown(self, manager, cooldown_repo):
        await manager.set_cooldown("ban", "g1", "10m", user_id="u1")

        await manager.cancel_cooldown("ban", "g1", "u1")

        assert not await manager.is_on_cooldown("ban", "g1", "u1")
        assert cooldown_repo.documents == {}
        assert cooldown_repo.calls[-1] == ("delete", "ban-g1-u1")

    @pytest.mark.asyncio
    async def test_cancel_without_database(self, manager, cooldown_repo, db_state):
        await manager.set_cooldown("ping", "g1", "30s", user_id="u1")
        db_state.connected = False

        await manager.cancel_cooldown("ping", "g1", "u1")

        assert manager.active_count == 0
        assert cooldown_repo.calls == []

    @pytest.mark.asyncio
    async def test_sync_writes_remaining_time(self, manager, clock, cooldown_repo):
        await manager.set_cooldown("ban", "g1", "10m", user_id="u1")
        await manager.set_cooldown("ping", "g1", "30s", user_id="u1")
        clock.advance(100)

        assert await manager.sync() == 1
        assert cooldown_repo.documents["ban-g1-u1"]["cooldown"] == 500

        clock.advance(600)
        assert await manager.sync() == 0
        assert cooldown_repo.documents == {}

    @pytest.mark.asyncio
    async def test_sync_without_database(self, manager, db_state):
        await manager.set_cooldown("ban", "g1", "10m", user_id="u1")
        db_state.connected = False

        assert await manager.sync() == 0

    @pytest.mark.asyncio
    async def test_unimplemented_repository_surfaces(self, clock, db_state):
        framework = SimpleNamespace(is_db_connected=lambda: True, cooldown_repository=CooldownRepository())
        manager = CooldownManager(framework, clock=clock)

        with pytest.raises(OperationNotImplementedError) as excinfo:
            await manager.set_cooldown("ban", "g1", "10m", user_id="u1")
        assert excinfo.value.operation == "save"

        with pytest.raises(NotImplementedError):
            await manager.get_remaining("kick", "g1", "u1")

    @pytest.mark.asyncio
    async def test_sync_evicts_expired_memory_cooldowns(self, manager, clock, cooldown_repo):
        for user in range(1000):
            await manager.set_cooldown("ping", "g1", "2s", user_id=f"u{user}")
        await manager.is_on_cooldown("kick", "g1", "u1")
        clock.advance(3600)

        assert await manager.sync() == 0
        assert manager.active_count == 0
        assert manager._looked_up == set()
        assert cooldown_repo.calls == [("find_one", "kick-g1-u1")]

    @pytest.mark.asyncio
    async def test_sync_evicts_without_database(self, manager, clock, db_state):
        await manager.set_cooldown("ping", "g1", "2s", user_id="u1")
        await manager.set_cooldown("ping", "g1", "1h", user_id="u2")
        db_state.connected = False
        clock.advance(10)

        await manager.sync()

        assert manager.active_count == 1
        assert manager._looked_up == {"ping-g1-u2"}
        assert await manager.is_on_cooldown("ping", "g1", "u2")

    @pytest.mark.asyncio
    async def test_persisted_cooldown_kept_until_storage_returns(self, manager, clock, cooldown_repo, db_state):
        await manager.set_cooldown("ban", "g1", "10m", user_id="u1")
        db_state.connected = False
        clock.advance(601)

        await manager.sync()
        assert manager.active_count == 1

        db_state.connected = True
        await manager.sync()
        assert manager.active_count == 0
        assert cooldown_repo.documents == {}
