import logging
import secrets
import time
from typing import Optional, Protocol

import redis.asyncio as redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError, TimeoutError

from app.core.config import settings

log = logging.getLogger(__name__)

# A session lookup that cannot reach Redis fails the request with a 500;
# retry only errors a reconnect can fix.
_RETRYABLE = (ConnectionError, TimeoutError)

_session_pool: Optional[redis.ConnectionPool] = None


class SessionStore(Protocol):
    """Key-value store mapping session ids to user ids, with expiry."""

    async def create(self, user_id: int, ttl: int) -> str: ...
    async def get_user_id(self, session_id: str) -> Optional[int]: ...
    async def revoke(self, session_id: str) -> None: ...


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


class RedisSessionStore:

    def __init__(self, client: redis.Redis, prefix: str = settings.SESSION_PREFIX):
        self.redis = client
        self.prefix = prefix

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}:{session_id}"

    async def create(self, user_id: int, ttl: int) -> str:
        session_id = new_session_id()
        await self.redis.set(self._key(session_id), str(user_id), ex=ttl)
        log.debug("Session created: user=%s ttl=%ss", user_id, ttl)
        return session_id

    async def get_user_id(self, session_id: str) -> Optional[int]:
        value = await self.redis.get(self._key(session_id))
        return int(value) if value is not None else None

    async def revoke(self, session_id: str) -> None:
        await self.redis.delete(self._key(session_id))


class MemorySessionStore:
    """In-process session store. Good for tests and single-process dev runs."""

    def __init__(self, clock=time.monotonic):
        self._sessions: dict[str, tuple[int, float]] = {}
        self._clock = clock

    async def create(self, user_id: int, ttl: int) -> str:
        session_id = new_session_id()
        self._sessions[session_id] = (user_id, self._clock() + ttl)
        return session_id

    async def get_user_id(self, session_id: str) -> Optional[int]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        user_id, expires_at = entry
        if self._clock() >= expires_at:
            self._sessions.pop(session_id, None)
            return None
        return user_id

    async def revoke(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)


def session_redis_client() -> redis.Redis:
    """
    Client for the session keyspace, borrowing from one lazily built pool.

    Sized and timed from settings: a slow Redis should fail a login or an
    auth check quickly rather than stall it.
    """
    global _session_pool
    if _session_pool is None:
        _session_pool = redis.ConnectionPool.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
            decode_responses=True,
        )
        log.info(
            "Session Redis pool initialized (max_connections=%s)",
            settings.REDIS_MAX_CONNECTIONS,
        )

    return redis.Redis(
        connection_pool=_session_pool,
        retry=Retry(
            ExponentialBackoff(cap=0.2, base=0.05),
            settings.REDIS_RETRY_ATTEMPTS,
            supported_errors=_RETRYABLE,
        ),
        retry_on_error=list(_RETRYABLE),
    )


async def close_redis() -> None:
    global _session_pool
    if _session_pool is not None:
        await _session_pool.disconnect()
        _session_pool = None
        log.info("Session Redis pool closed")


async def get_session_store() -> SessionStore:
    return RedisSessionStore(session_redis_client())
