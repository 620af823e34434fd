# cart_service/tasks/expire.py
import asyncio

from cart_service.celery_worker import celery_app
from cart_service.data.database import SessionLocal, engine
from cart_service.repos.cart_repo import CartRepo
from cart_service.services.cache_service import CacheService
from cart_service.services.cart_lock import cart_key
from cart_service.services.lock_service import LockService
from cart_service.utils.settings import CART_LOCK_TTL_SECONDS
from cart_service.utils.logging import get_logger

logger = get_logger(__name__)


async def expire_carts(carts, cache, lock_service, batch_size: int = 100) -> int:
    """
    Usuwa z bazy i z cache koszyki po terminie.

    Odczyt i mutacje same czyszcza wygasle koszyki, to jest tylko siatka
    bezpieczenstwa dla koszykow ktorych nikt juz nie dotyka. Koszyk zajety
    przez trwajaca mutacje jest pomijany do nastepnego przebiegu.
    """
    expired = await carts.find_expired(limit=batch_size)
    logger.info(f"Found {len(expired)} carts to expire")

    removed = 0
    for cart in expired:
        key = cart_key(cart.customer_id)
        token = await lock_service.acquire(key, CART_LOCK_TTL_SECONDS)
        if not token:
            logger.info(f"Cart {cart.id} is locked, skipping")
            continue

        try:
            # pod lockiem jeszcze raz, koszyk mogl zostac odtworzony
            current = await carts.find_by_customer_id(cart.customer_id)
            if current is None or not current.is_expired():
                continue

            await carts.clear(cart.customer_id, cart_id=current.id)
            await cache.delete(key)
            removed += 1
            logger.info(f"Expired cart {current.id} of customer {cart.customer_id}")
        finally:
            await lock_service.release(key, token)

    return removed


async def _run() -> int:
    cache = CacheService()
    lock_service = LockService()
    await cache.connect()
    await lock_service.connect()
    try:
        async with SessionLocal() as db:
            return await expire_carts(CartRepo(db), cache, lock_service)
    finally:
        await cache.close()
        await lock_service.close()
        # pula polaczen jest zwiazana z petla, a kazdy task ma nowa petle
        await engine.dispose()


@celery_app.task(name="cart_service.tasks.expire.expire_carts_task")
def expire_carts_task():
    logger.info("Expire carts task started")
    return asyncio.run(_run())
