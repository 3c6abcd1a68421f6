"""Unit tests for the in-memory guild session registry."""

import asyncio

import pytest

from discord_music_queue.domain.shared.exceptions import SessionAlreadyExistsError


class TestInMemoryQueueSessionRegistry:
    def test_create_and_get(self, registry):
        session = registry.create(1, 2, 3)

        assert registry.get(1) is session
        assert session.guild_id == 1
        assert session.voice_channel_id == 2
        assert session.text_channel_id == 3
        assert len(registry) == 1

    def test_get_missing(self, registry):
        assert registry.get(1) is None

    def test_create_twice_raises(self, registry):
        registry.create(1, 2, 3)

        with pytest.raises(SessionAlreadyExistsError) as exc_info:
            registry.create(1, 2, 3)
        assert exc_info.value.code == "ALREADY_EXISTS"

    def test_remove_returns_session(self, registry):
        session = registry.create(1, 2, 3)

        assert registry.remove(1) is session
        assert registry.get(1) is None
        assert registry.remove(1) is None

    def test_recreate_after_remove(self, registry):
        first = registry.create(1, 2, 3)
        registry.remove(1)

        assert registry.create(1, 2, 3) is not first

    def test_active_guild_ids(self, registry):
        registry.create(1, 2, 3)
        registry.create(4, 5, 6)

        assert sorted(registry.active_guild_ids()) == [1, 4]

    def test_lock_is_stable_per_guild(self, registry):
        assert registry.lock(1) is registry.lock(1)
        assert registry.lock(1) is not registry.lock(2)

    def test_lock_survives_session_removal(self, registry):
        lock = registry.lock(1)
        registry.create(1, 2, 3)
        registry.remove(1)

        assert registry.lock(1) is lock

    async def test_different_guild_locks_do_not_block(self, registry):
        async with registry.lock(1):
            await asyncio.wait_for(registry.lock(2).acquire(), timeout=0.1)
            registry.lock(2).release()

    async def test_same_guild_operations_run_in_arrival_order(self, registry):
        order = []

        async def op(name):
            async with registry.lock(1):
                order.append(f"{name}-start")
                await asyncio.sleep(0)
                order.append(f"{name}-end")

        await asyncio.gather(op("a"), op("b"), op("c"))

        assert order == ["a-start", "a-end", "b-start", "b-end", "c-start", "c-end"]

    def test_idle_lock_of_guild_without_session_pruned(self, registry):
        stale = registry.lock(1)

        registry.lock(2)

        assert registry.lock(1) is not stale

    def test_lock_kept_while_session_exists(self, registry):
        lock = registry.lock(1)
        registry.create(1, 2, 3)

        registry.lock(2)

        assert registry.lock(1) is lock

    async def test_held_lock_not_pruned(self, registry):
        lock = registry.lock(1)

        async with lock:
            registry.lock(2)
            assert registry.lock(1) is lock

    async def test_lock_with_waiter_not_pruned(self, registry):
        lock = registry.lock(1)
        await lock.acquire()
        waiter = asyncio.create_task(lock.acquire())
        await asyncio.sleep(0)
        lock.release()

        registry.lock(2)

        assert registry.lock(1) is lock
        await waiter
        lock.release()


class TestStopGeneration:
    def test_starts_at_zero(self, registry):
        assert registry.stop_generation(1) == 0

    def test_record_stop_increments_per_guild(self, registry):
        assert registry.record_stop(1) == 1
        assert registry.record_stop(1) == 2

        assert registry.stop_generation(1) == 2
        assert registry.stop_generation(2) == 0

    def test_survives_session_removal_and_pruning(self, registry):
        registry.lock(1)
        registry.create(1, 2, 3)
        registry.remove(1)
        registry.record_stop(1)

        registry.lock(2)

        assert registry.stop_generation(1) == 1
