import secrets
import time

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from cart_service.utils.retry import redis_retry
from cart_service.utils.settings import REDIS_URL
from cart_service.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#to samo dla przedluzenia, tylko wlasciciel moze przedluzyc
_EXTEND_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('EXPIRE', KEYS[1], ARGV[2])
else
    return 0
end
"""

#redis wykonuje atomowo przez lua, skrypt dziala jako jedna nieprzerywalna operacja
#nie mozna wcisnac sie miedzy GET a DEL, wiec tu jest get + porownanie + del wszystko naraz


class LockService:
    """
    -lock na nazwany klucz z TTL (SET NX EX)
    -token wlasciciela, zwalnia tylko ten kto zalozyl
    -fallback w pamieci procesu gdy redis niedostepny

    Fallback dziala tylko w obrebie jednego procesu. Przy kilku instancjach
    serwisu redis musi byc osiagalny, inaczej wzajemne wykluczanie miedzy
    instancjami nie jest zachowane.
    """

    PREFIX = "lock:"

    def __init__(self, url: str | None = None, client: aioredis.Redis | None = None, clock=time.monotonic):
        self.url = url or REDIS_URL
        self.redis = client
        self._clock = clock
        # klucz -> (token, wygasa o [monotonic])
        self._fallback: dict[str, tuple[str, float]] = {}

    @property
    def fallback_mode(self) -> bool:
        return self.redis is None

    async def connect(self) -> None:
        if self.redis is None:
            self.redis = aioredis.Redis.from_url(self.url, decode_responses=True)

        try:
            await self._ping()
            logger.info(f"Lock service connected to {self.url}")
        except (RedisError, OSError) as e:
            logger.warning(f"Redis niedostepny dla locków ({e}), fallback w pamieci procesu")
            await self._drop_client()

    @redis_retry()
    async def _ping(self) -> None:
        await self.redis.ping()

    async def _drop_client(self) -> None:
        client, self.redis = self.redis, None
        if client is not None:
            try:
                await client.aclose()
            except (RedisError, OSError):
                pass

    async def close(self) -> None:
        if self.redis is not None:
            await self.redis.aclose()

    async def acquire(self, key: str, ttl_seconds: int) -> str | None:
        lock_key = self.PREFIX + key
        token = secrets.token_hex(16)

        if self.fallback_mode:
            return self._acquire_local(lock_key, token, ttl_seconds)

        try:
            #SET lock:cart:1 <token> NX EX 10
            acquired = await self.redis.set(
                name=lock_key,
                value=token,
                nx=True, #jesli klucz istnieje to nic nie rob i None
                ex=ttl_seconds, #wygasa sam, nie trzeba recznie czyscic przy crashu
            )
        except (RedisError, OSError) as e:
            # blad backendu = lock niezalozony, nigdy wyjatek do wywolujacego
            logger.error(f"Error acquiring lock {lock_key}: {e}")
            return None

        if not acquired:
            return None

        logger.debug(f"Acquired lock {lock_key}")
        return token

    async def release(self, key: str, token: str) -> bool:
        lock_key = self.PREFIX + key

        if self.fallback_mode:
            held = self._fallback.get(lock_key)
            if held and held[0] == token:
                del self._fallback[lock_key]
                return True
            return False

        try:
            res = await self.redis.eval(_RELEASE_LUA, 1, lock_key, token)
        except (RedisError, OSError) as e:
            logger.error(f"Error releasing lock {lock_key}: {e}")
            return False

        if not res:
            logger.warning(f"Lock {lock_key} wygasl lub nalezy do kogos innego, nie zwalniam")
        return bool(res)

    async def extend(self, key: str, token: str, ttl_seconds: int) -> bool:
        lock_key = self.PREFIX + key

        if self.fallback_mode:
            held = self._fallback.get(lock_key)
            if held and held[0] == token and held[1] > self._clock():
                self._fallback[lock_key] = (token, self._clock() + ttl_seconds)
                return True
            return False

        try:
            res = await self.redis.eval(_EXTEND_LUA, 1, lock_key, token, ttl_seconds)
        except (RedisError, OSError) as e:
            logger.error(f"Error extending lock {lock_key}: {e}")
            return False
        return bool(res)

    def _acquire_local(self, lock_key: str, token: str, ttl_seconds: int) -> str | None:
        # brak await miedzy sprawdzeniem a zapisem, w petli asyncio to jest atomowe
        now = self._clock()
        held = self._fallback.get(lock_key)
        if held and held[1] > now:
            return None

        self._fallback[lock_key] = (token, now + ttl_seconds)
        self._sweep(now)
        return token

    def _sweep(self, now: float) -> None:
        for k in [k for k, (_, expiry) in self._fallback.items() if expiry <= now]:
            del self._fallback[k]
