# cart_service/utils/retry.py
import asyncio

import requests
import redis
from tenacity import (
    AsyncRetrying,
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from cart_service.utils.settings import (
    LOCK_RETRY_ATTEMPTS,
    LOCK_RETRY_INITIAL_DELAY,
    LOCK_RETRY_MAX_DELAY,
)


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type((redis.RedisError, OSError)),
    )


def lock_backoff(
    attempts: int = LOCK_RETRY_ATTEMPTS,
    initial_delay: float = LOCK_RETRY_INITIAL_DELAY,
    max_delay: float = LOCK_RETRY_MAX_DELAY,
    sleep=asyncio.sleep,
) -> AsyncRetrying:
    """
    Ponawianie proby zalozenia locka.

    Kolejne proby po 50, 100, 200, 400 ms (max 500 ms), po ostatniej
    nieudanej probie nie ma juz czekania - wynik None.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=initial_delay, max=max_delay),
        retry=retry_if_result(lambda token: not token),
        retry_error_callback=lambda state: None,
        sleep=sleep,
    )
