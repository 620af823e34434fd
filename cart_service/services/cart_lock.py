# cart_service/services/cart_lock.py
import asyncio
from contextlib import asynccontextmanager

from cart_service.domain.errors import CartBusyError
from cart_service.domain.ports import LockService
from cart_service.utils.retry import lock_backoff
from cart_service.utils.settings import CART_LOCK_TTL_SECONDS
from cart_service.utils.logging import get_logger

logger = get_logger(__name__)


def cart_key(customer_id: str) -> str:
    # ten sam klucz dla locka i dla cache koszyka (lock ma dodatkowy prefix "lock:")
    return f"cart:{customer_id}"


async def acquire_lock_with_retry(
    lock_service: LockService,
    key: str,
    ttl_seconds: int = CART_LOCK_TTL_SECONDS,
    sleep=asyncio.sleep,
) -> str | None:
    """Zwraca token locka albo None gdy po wszystkich probach lock dalej zajety."""
    return await lock_backoff(sleep=sleep)(lock_service.acquire, key, ttl_seconds)


@asynccontextmanager
async def hold_cart_lock(lock_service: LockService, customer_id: str, sleep=asyncio.sleep):
    """
    Sekcja krytyczna na koszyku klienta.

    Najwyzej jedna mutacja koszyka na klienta naraz. Lock jest zwalniany na
    kazdej sciezce wyjscia, a gdy proces padnie - wygasa sam po TTL.
    """
    key = cart_key(customer_id)
    token = await acquire_lock_with_retry(lock_service, key, sleep=sleep)

    if not token:
        logger.warning(f"Lock {key} zajety po wszystkich probach")
        raise CartBusyError(customer_id)

    try:
        yield token
    finally:
        await lock_service.release(key, token)
