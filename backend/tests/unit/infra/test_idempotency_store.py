"""
Unit tests for idempotency stores.

The Redis-backed store runs against fakeredis.FakeRedis, so no server is
needed; the in-memory store gets a scripted monotonic clock.
"""

from __future__ import annotations

import fakeredis
import pytest
from surveyadmin.infra.redis.redis_idempotency_store import RedisIdempotencyStore
from surveyadmin.services._shared.ports import idempotency_store
from surveyadmin.services._shared.ports.idempotency_store import InMemoryIdempotencyStore


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisIdempotencyStore(r=fake_redis)


class TestRedisIdempotencyStore:
    def test_missing_key(self, store):
        assert store.get("nope") is None

    def test_save_and_get_round_trip(self, store, fake_redis):
        payload = {"status": 201, "body": {"data": {"token": "Zx9"}}}
        store.save("k1", payload, ttl_seconds=60)

        assert store.get("k1") == payload
        assert 0 < fake_redis.ttl("idem:subjects:k1") <= 60

    def test_namespace_isolates_keys(self, fake_redis):
        a = RedisIdempotencyStore(fake_redis, namespace="a")
        b = RedisIdempotencyStore(fake_redis, namespace="b")
        a.save("same", {"v": 1}, ttl_seconds=10)

        assert b.get("same") is None

    def test_non_positive_ttl_still_expires(self, store, fake_redis):
        store.save("k", {"v": 1}, ttl_seconds=0)
        assert fake_redis.ttl("idem:subjects:k") == 1


class TestInMemoryIdempotencyStore:
    def test_entries_expire(self, monkeypatch):
        now = [100.0]
        monkeypatch.setattr(idempotency_store.time, "monotonic", lambda: now[0])
        store = InMemoryIdempotencyStore()

        store.save("k", {"v": 1}, ttl_seconds=5)
        assert store.get("k") == {"v": 1}

        now[0] = 105.0
        assert store.get("k") is None
        assert store.get("k") is None

    def test_save_overwrites(self):
        store = InMemoryIdempotencyStore()
        store.save("k", {"v": 1}, ttl_seconds=60)
        store.save("k", {"v": 2}, ttl_seconds=60)

        assert store.get("k") == {"v": 2}
