# careerprofile/cache/connection.py
import asyncio
import logging
from typing import Awaitable, Callable, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from careerprofile.core.config import redis_settings

_log = logging.getLogger(__name__)


class _SharedClient:
    """
    Holds one lazily created client. Concurrent first callers share a single
    creation task; a failed creation is retried on the next call.
    """

    def __init__(self, factory: Callable[[], Awaitable[Optional[aioredis.Redis]]]):
        self._factory = factory
        self._task: Optional[asyncio.Task] = None
        self._client: Optional[aioredis.Redis] = None

    async def get(self) -> Optional[aioredis.Redis]:
        if self._client is not None:
            return self._client
        if self._task is None:
            self._task = asyncio.create_task(self._factory())
        task = self._task
        try:
            self._client = await task
        except Exception as e:
            _log.error(f"Redis client creation failed: {e}", exc_info=True)
            self._client = None
        finally:
            if self._task is task:
                self._task = None
        return self._client

    async def reset(self) -> Optional[aioredis.Redis]:
        """Forgets the client and returns it so the caller can close it."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                _log.debug("Cancelled pending Redis client creation")
        client, self._client = self._client, None
        return client


async def _create_redis_client() -> Optional[aioredis.Redis]:
    if not redis_settings.enabled:
        _log.info("Redis disabled by configuration; report cache runs on the database only")
        return None
    url = redis_settings.url
    _log.info(f"Creating Redis client for {url}")
    try:
        # from_url connects lazily; operations fail on their own if Redis is down
        return aioredis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=redis_settings.connect_timeout_seconds,
            socket_timeout=redis_settings.socket_timeout_seconds,
        )
    except (RedisError, ValueError) as exc:
        _log.error(f"Invalid Redis configuration for {url}, cache disabled ({exc})")
        return None


_shared = _SharedClient(_create_redis_client)


async def get_redis() -> Optional[aioredis.Redis]:
    """
    Return a shared Redis client, created on first use.
    Returns None if Redis is disabled or the client cannot be created.
    """
    return await _shared.get()


async def close_redis() -> None:
    """Close and discard the cached client."""
    client = await _shared.reset()
    if client is None:
        return
    _log.info("Closing Redis connection pool...")
    try:
        await client.aclose()
    except RedisError as e:
        _log.warning(f"Error closing Redis connection: {e}")
