"""
Тесты хранилища ключ-значение и аренды запусков анализа.
"""

from uuid import uuid4

import pytest

from editorial.application.analysis.run_guard import AnalysisRunGuard, lease_key
from editorial.infrastructure.cache.memory_kv_store import InMemoryKeyValueStore
from editorial.shared.exceptions.domain_exceptions import ConflictError


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryKeyValueStore(clock=clock)


class TestInMemoryStore:
    """TTL и атомарные операции."""

    @pytest.mark.asyncio
    async def test_set_and_get(self, store):
        await store.set("k", "v")
        assert await store.get("k") == "v"

    @pytest.mark.asyncio
    async def test_entry_expires(self, store, clock):
        await store.set("k", "v", ttl_seconds=10)
        clock.now += 11
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_set_if_absent(self, store, clock):
        assert await store.set_if_absent("k", "first", ttl_seconds=5)
        assert not await store.set_if_absent("k", "second", ttl_seconds=5)
        clock.now += 6
        assert await store.set_if_absent("k", "third")
        assert await store.get("k") == "third"

    @pytest.mark.asyncio
    async def test_compare_and_delete(self, store):
        await store.set("k", "mine")
        assert not await store.compare_and_delete("k", "theirs")
        assert await store.compare_and_delete("k", "mine")
        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, store):
        assert not await store.delete("missing")

    @pytest.mark.asyncio
    async def test_purge_expired(self, store, clock):
        await store.set("a", "1", ttl_seconds=1)
        await store.set("b", "2")
        clock.now += 2
        assert store.purge_expired() == 1


class TestRunGuard:
    """Один анализ на статью."""

    @pytest.mark.asyncio
    async def test_second_run_conflicts(self, store):
        guard = AnalysisRunGuard(store)
        article_id = uuid4()

        async with guard.hold(article_id, ttl_seconds=60):
            assert await guard.is_running(article_id)
            with pytest.raises(ConflictError):
                async with guard.hold(article_id, ttl_seconds=60):
                    pass

        assert not await guard.is_running(article_id)

    @pytest.mark.asyncio
    async def test_lease_released_on_error(self, store):
        guard = AnalysisRunGuard(store)
        article_id = uuid4()

        with pytest.raises(RuntimeError):
            async with guard.hold(article_id, ttl_seconds=60):
                raise RuntimeError("tool crashed")

        assert await store.get(lease_key(article_id)) is None

    @pytest.mark.asyncio
    async def test_expired_lease_not_deleted_when_taken_over(self, store, clock):
        guard = AnalysisRunGuard(store)
        article_id = uuid4()

        async with guard.hold(article_id, ttl_seconds=10):
            clock.now += 11
            # Аренда истекла, другой процесс её захватил
            assert await store.set_if_absent(lease_key(article_id), "other-owner", ttl_seconds=10)

        assert await store.get(lease_key(article_id)) == "other-owner"

    @pytest.mark.asyncio
    async def test_different_articles_run_in_parallel(self, store):
        guard = AnalysisRunGuard(store)
        async with guard.hold(uuid4(), ttl_seconds=60):
            async with guard.hold(uuid4(), ttl_seconds=60):
                pass
