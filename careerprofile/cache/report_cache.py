# careerprofile/cache/report_cache.py
"""
Redis front for a ReportCache.

Reads check Redis first and fall back to the backing cache, filling Redis on
a backing hit. Writes go to the backing cache, then Redis. Any Redis failure
degrades to the backing cache alone.
"""
import json
import logging
from typing import Awaitable, Callable, Optional

import redis.asyncio as aioredis
from pydantic import ValidationError
from redis.exceptions import RedisError

from careerprofile.cache.connection import get_redis
from careerprofile.core.config import redis_settings
from services.riasec_engine.interfaces import ReportCache
from services.riasec_engine.models import ReportEnvelope

logger = logging.getLogger(__name__)

NAMESPACE = "cpe:"


class RedisReportCache(ReportCache):
    def __init__(
        self,
        backing: ReportCache,
        redis_getter: Callable[[], Awaitable[Optional[aioredis.Redis]]] = get_redis,
        ttl: int = redis_settings.report_ttl_seconds,
        key_prefix: str = redis_settings.key_prefix,
    ):
        self.backing = backing
        self.redis_getter = redis_getter
        self.ttl = ttl
        self.key_prefix = key_prefix

    def key_for(self, test_attempt_id: int) -> str:
        return f"{NAMESPACE}{self.key_prefix}:{test_attempt_id}"

    async def find(self, test_attempt_id: int) -> Optional[ReportEnvelope]:
        key = self.key_for(test_attempt_id)
        redis_conn = await self.redis_getter()
        if redis_conn is not None:
            try:
                raw = await redis_conn.get(key)
            except RedisError as e:
                logger.warning(f"Redis GET failed for {key}: {e}")
                raw = None
            if raw is not None:
                try:
                    envelope = ReportEnvelope.model_validate_json(raw)
                    logger.debug(f"Cache hit: key='{key}'")
                    return envelope
                except ValidationError as e:
                    logger.warning(f"Discarding unreadable cached report at {key}: {e}")

        envelope = await self.backing.find(test_attempt_id)
        if envelope is not None and redis_conn is not None:
            await self._set(redis_conn, key, envelope)
        return envelope

    async def store(self, test_attempt_id: int, envelope: ReportEnvelope) -> bool:
        stored = await self.backing.store(test_attempt_id, envelope)
        if not stored:
            return False
        redis_conn = await self.redis_getter()
        if redis_conn is not None:
            await self._set(redis_conn, self.key_for(test_attempt_id), envelope)
        return True

    async def _set(self, redis_conn: aioredis.Redis, key: str, envelope: ReportEnvelope) -> None:
        try:
            await redis_conn.set(key, json.dumps(envelope.to_storage()), ex=self.ttl if self.ttl > 0 else None)
            logger.debug(f"Cache set: key='{key}', expiry={self.ttl}s")
        except RedisError as e:
            logger.warning(f"Redis SET failed for {key}: {e}")
