import json
import time
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from cart_service.utils.retry import redis_retry
from cart_service.utils.settings import REDIS_URL
from cart_service.utils.logging import get_logger

logger = get_logger(__name__)


def _default(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if hasattr(value, "to_dict"):
        return value.to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dumps(value: Any) -> str:
    return json.dumps(value, default=_default)


class CacheService:
    """
    Cache klucz -> wartosc z TTL.

    Redis gdy dostepny, inaczej slownik w pamieci procesu. W obu przypadkach
    wartosc jest trzymana jako JSON, wiec get zwraca zwykle typy (dict, list,
    str) - daty trzeba odtworzyc po stronie wywolujacego.

    Bledy backendu sa logowane i polykane, cache nigdy nie psuje operacji.
    """

    def __init__(self, url: str | None = None, client: aioredis.Redis | None = None, clock=time.monotonic):
        self.url = url or REDIS_URL
        self.redis = client
        self._clock = clock
        # klucz -> (json, wygasa o [monotonic] albo None)
        self._fallback: dict[str, tuple[str, float | None]] = {}

    @property
    def fallback_mode(self) -> bool:
        return self.redis is None

    async def connect(self) -> None:
        if self.redis is None:
            self.redis = aioredis.Redis.from_url(self.url, decode_responses=True)

        try:
            await self._ping()
            logger.info(f"Cache service connected to {self.url}")
        except (RedisError, OSError) as e:
            logger.warning(f"Redis niedostepny dla cache ({e}), fallback w pamieci procesu")
            client, self.redis = self.redis, None
            try:
                await client.aclose()
            except (RedisError, OSError):
                pass

    @redis_retry()
    async def _ping(self) -> None:
        await self.redis.ping()

    async def close(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()

    async def get(self, key: str) -> Any:
        try:
            if self.fallback_mode:
                raw = self._get_local(key)
            else:
                raw = await self.redis.get(key)
        except (RedisError, OSError) as e:
            logger.error(f"Error getting cache key {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except ValueError:
            logger.error(f"Uszkodzony wpis w cache {key}, usuwam")
            await self.delete(key)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        # ttl <= 0 oznacza ze wpis juz by wygasl, nie zapisujemy go wcale
        if ttl_seconds is not None and ttl_seconds <= 0:
            await self.delete(key)
            return

        try:
            serialized = dumps(value)
        except TypeError as e:
            logger.error(f"Nie mozna zserializowac wartosci dla {key}: {e}")
            return

        try:
            if self.fallback_mode:
                expiry = self._clock() + ttl_seconds if ttl_seconds is not None else None
                self._fallback[key] = (serialized, expiry)
                self._sweep()
            elif ttl_seconds is not None:
                await self.redis.set(key, serialized, ex=ttl_seconds)
            else:
                await self.redis.set(key, serialized)
        except (RedisError, OSError) as e:
            logger.error(f"Error setting cache key {key}: {e}")

    async def ttl(self, key: str) -> int | None:
        """Pozostaly TTL w sekundach, None gdy brak wpisu albo brak wygasania."""
        if self.fallback_mode:
            entry = self._fallback.get(key)
            if entry is None or entry[1] is None:
                return None
            return max(0, int(entry[1] - self._clock()))

        try:
            res = await self.redis.ttl(key)
        except (RedisError, OSError) as e:
            logger.error(f"Error reading ttl of cache key {key}: {e}")
            return None
        return res if res >= 0 else None

    async def delete(self, key: str) -> None:
        try:
            if self.fallback_mode:
                self._fallback.pop(key, None)
            else:
                await self.redis.delete(key)
        except (RedisError, OSError) as e:
            logger.error(f"Error deleting cache key {key}: {e}")

    async def clear(self) -> None:
        try:
            if self.fallback_mode:
                self._fallback.clear()
            else:
                await self.redis.flushdb()
        except (RedisError, OSError) as e:
            logger.error(f"Error clearing cache: {e}")

    def _get_local(self, key: str) -> str | None:
        entry = self._fallback.get(key)
        if entry is None:
            return None

        raw, expiry = entry
        if expiry is not None and expiry <= self._clock():
            del self._fallback[key]
            return None
        return raw

    def _sweep(self) -> None:
        now = self._clock()
        expired = [k for k, (_, expiry) in self._fallback.items() if expiry is not None and expiry <= now]
        for k in expired:
            del self._fallback[k]
