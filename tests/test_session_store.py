from app.core.config import settings
from app.services.session_store import (
    MemorySessionStore,
    RedisSessionStore,
    close_redis,
    session_redis_client,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the session store."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.expiry: dict[str, int] = {}

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiry[key] = ex
        return True

    async def get(self, key):
        return self.data.get(key)

    async def delete(self, key):
        self.data.pop(key, None)
        return 1


async def test_memory_store_roundtrip() -> None:
    store = MemorySessionStore()
    session_id = await store.create(7, ttl=60)

    assert await store.get_user_id(session_id) == 7
    assert await store.get_user_id("missing") is None


async def test_memory_store_expires_sessions() -> None:
    clock = FakeClock()
    store = MemorySessionStore(clock=clock)
    session_id = await store.create(7, ttl=60)

    clock.now += 59
    assert await store.get_user_id(session_id) == 7

    clock.now += 1
    assert await store.get_user_id(session_id) is None


async def test_memory_store_revoke() -> None:
    store = MemorySessionStore()
    session_id = await store.create(7, ttl=60)

    await store.revoke(session_id)

    assert await store.get_user_id(session_id) is None


async def test_redis_store_sets_ttl_and_prefix() -> None:
    client = FakeRedis()
    store = RedisSessionStore(client, prefix="session")

    session_id = await store.create(12, ttl=300)

    key = f"session:{session_id}"
    assert client.data[key] == "12"
    assert client.expiry[key] == 300
    assert await store.get_user_id(session_id) == 12

    await store.revoke(session_id)
    assert await store.get_user_id(session_id) is None


async def test_session_ids_are_unique() -> None:
    store = MemorySessionStore()
    ids = {await store.create(1, ttl=60) for _ in range(20)}
    assert len(ids) == 20


async def test_session_client_pool_follows_settings(monkeypatch) -> None:
    monkeypatch.setattr(settings, "REDIS_MAX_CONNECTIONS", 7)
    monkeypatch.setattr(settings, "REDIS_SOCKET_TIMEOUT", 0.5)
    await close_redis()

    first, second = session_redis_client(), session_redis_client()
    try:
        pool = first.connection_pool
        assert second.connection_pool is pool
        assert pool.max_connections == 7
        assert pool.connection_kwargs["socket_timeout"] == 0.5
        assert pool.connection_kwargs["socket_connect_timeout"] == 0.5
    finally:
        await close_redis()

    assert session_redis_client().connection_pool is not pool
    await close_redis()
