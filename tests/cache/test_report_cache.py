# tests/cache/test_report_cache.py
import json

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from redis.exceptions import ConnectionError as RedisConnectionError

from careerprofile.cache.report_cache import NAMESPACE, RedisReportCache
from services.riasec_engine.composer import ReportComposer
from services.riasec_engine.models import ReportEnvelope

SCORES = {"R": 85.0, "I": 70.0, "A": 10.0, "S": 5.0, "E": 5.0, "C": 5.0}

# --- Fixtures ---

@pytest.fixture
def redis_store():
    """Dict-backed stand-in for a redis.asyncio client."""
    store = {}
    client = MagicMock()

    async def _get(key):
        return store.get(key)

    async def _set(key, value, ex=None):
        store[key] = value
        return True

    client.get = AsyncMock(side_effect=_get)
    client.set = AsyncMock(side_effect=_set)
    client.store = store
    return client

@pytest_asyncio.fixture
async def envelope():
    composed = await ReportComposer().compose(SCORES)
    return ReportEnvelope(scores=SCORES, report=composed.report)

def make_cache(backing, redis_client):
    return RedisReportCache(backing, redis_getter=AsyncMock(return_value=redis_client), ttl=60, key_prefix="riasec:report")

# --- Test Cases ---

@pytest.mark.asyncio
async def test_store_writes_through_to_backing_and_redis(report_cache, redis_store, envelope):
    cache = make_cache(report_cache, redis_store)

    assert await cache.store(7, envelope) is True

    assert report_cache.entries[7] == envelope
    key = f"{NAMESPACE}riasec:report:7"
    assert json.loads(redis_store.store[key])["report"]["riasecProfile"]["topTraits"][0]["code"] == "R"
    redis_store.set.assert_awaited_once()
    assert redis_store.set.call_args.kwargs["ex"] == 60


@pytest.mark.asyncio
async def test_find_prefers_redis(report_cache, redis_store, envelope):
    cache = make_cache(report_cache, redis_store)
    await cache.store(7, envelope)
    report_cache.entries.clear()

    assert await cache.find(7) == envelope


@pytest.mark.asyncio
async def test_find_fills_redis_from_backing(report_cache, redis_store, envelope):
    report_cache.entries[7] = envelope
    cache = make_cache(report_cache, redis_store)

    assert await cache.find(7) == envelope
    assert f"{NAMESPACE}riasec:report:7" in redis_store.store


@pytest.mark.asyncio
async def test_find_miss(report_cache, redis_store):
    assert await make_cache(report_cache, redis_store).find(99) is None


@pytest.mark.asyncio
async def test_unavailable_redis_degrades_to_backing(report_cache, envelope):
    cache = make_cache(report_cache, None)

    assert await cache.store(7, envelope) is True
    assert await cache.find(7) == envelope


@pytest.mark.asyncio
async def test_redis_errors_degrade_to_backing(report_cache, redis_store, envelope):
    redis_store.get.side_effect = RedisConnectionError("redis down")
    redis_store.set.side_effect = RedisConnectionError("redis down")
    cache = make_cache(report_cache, redis_store)

    assert await cache.store(7, envelope) is True
    assert await cache.find(7) == envelope


@pytest.mark.asyncio
async def test_corrupt_redis_entry_falls_back(report_cache, redis_store, envelope):
    report_cache.entries[7] = envelope
    redis_store.store[f"{NAMESPACE}riasec:report:7"] = '{"scores": "nope"}'
    cache = make_cache(report_cache, redis_store)

    assert await cache.find(7) == envelope


@pytest.mark.asyncio
async def test_skipped_backing_store_is_not_mirrored(redis_store, envelope):
    backing = MagicMock()
    backing.store = AsyncMock(return_value=False)
    cache = make_cache(backing, redis_store)

    assert await cache.store(7, envelope) is False
    redis_store.set.assert_not_called()
