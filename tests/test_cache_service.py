from datetime import datetime, timezone
from decimal import Decimal

from cart_service.services.cache_service import CacheService

from fakes import BrokenRedis


class TestFallbackCache:
    async def test_set_get_delete(self):
        cache = CacheService()

        await cache.set("k", {"a": [1, 2, {"b": None}]})
        assert await cache.get("k") == {"a": [1, 2, {"b": None}]}

        await cache.delete("k")
        assert await cache.get("k") is None

    async def test_values_are_serialized_not_shared(self):
        cache = CacheService()
        value = {"items": [{"quantity": 1}]}

        await cache.set("k", value)
        value["items"][0]["quantity"] = 99

        assert (await cache.get("k"))["items"][0]["quantity"] == 1

    async def test_datetimes_and_decimals_come_back_as_strings(self):
        cache = CacheService()
        ts = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

        await cache.set("k", {"at": ts, "price": Decimal("9.99")})

        assert await cache.get("k") == {"at": ts.isoformat(), "price": "9.99"}

    async def test_entry_expires_after_ttl(self):
        clock = [100.0]
        cache = CacheService(clock=lambda: clock[0])

        await cache.set("k", "v", ttl_seconds=30)
        assert await cache.ttl("k") == 30

        clock[0] += 29
        assert await cache.get("k") == "v"

        clock[0] += 1
        assert await cache.get("k") is None

    async def test_no_ttl_means_no_expiry(self):
        clock = [100.0]
        cache = CacheService(clock=lambda: clock[0])

        await cache.set("k", "v")
        clock[0] += 10 ** 6

        assert await cache.get("k") == "v"
        assert await cache.ttl("k") is None

    async def test_non_positive_ttl_removes_entry(self):
        cache = CacheService()
        await cache.set("k", "old")

        await cache.set("k", "new", ttl_seconds=0)

        assert await cache.get("k") is None

    async def test_expired_entries_are_swept_on_write(self):
        clock = [100.0]
        cache = CacheService(clock=lambda: clock[0])
        await cache.set("old", 1, ttl_seconds=5)

        clock[0] += 10
        await cache.set("new", 2, ttl_seconds=5)

        assert "old" not in cache._fallback

    async def test_clear(self):
        cache = CacheService()
        await cache.set("a", 1)
        await cache.set("b", 2)

        await cache.clear()

        assert await cache.get("a") is None
        assert await cache.get("b") is None


class TestRedisCache:
    async def test_set_with_ttl(self, fake_redis):
        cache = CacheService(client=fake_redis)

        await cache.set("cart:C1", {"id": "X"}, ttl_seconds=120)

        assert await cache.get("cart:C1") == {"id": "X"}
        assert 0 < await cache.ttl("cart:C1") <= 120

    async def test_set_without_ttl(self, fake_redis):
        cache = CacheService(client=fake_redis)

        await cache.set("k", [1, 2])

        assert await fake_redis.ttl("k") == -1
        assert await cache.ttl("k") is None

    async def test_corrupted_entry_is_dropped(self, fake_redis):
        cache = CacheService(client=fake_redis)
        await fake_redis.set("k", "{not json")

        assert await cache.get("k") is None
        assert await fake_redis.exists("k") == 0

    async def test_backend_errors_are_swallowed(self):
        cache = CacheService(client=BrokenRedis())

        await cache.set("k", 1, ttl_seconds=10)
        await cache.delete("k")
        await cache.clear()

        assert await cache.get("k") is None

    async def test_unreachable_redis_switches_to_fallback(self):
        cache = CacheService(client=BrokenRedis())

        await cache.connect()
        await cache.set("k", 1)

        assert cache.fallback_mode
        assert await cache.get("k") == 1
