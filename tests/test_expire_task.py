from datetime import datetime, timedelta, timezone

from cart_service.domain.cart import Cart, CartItem
from cart_service.tasks.expire import expire_carts


def _cart(customer_id, expires_in):
    return Cart(
        id=f"CART-{customer_id}",
        customer_id=customer_id,
        items=[CartItem("P1", 1)],
        expires_at=datetime.now(timezone.utc) + expires_in,
    )


class TestExpireCarts:
    async def test_removes_only_expired_carts(self, carts, cache, lock_service):
        carts.carts["C1"] = _cart("C1", timedelta(seconds=-5))
        carts.carts["C2"] = _cart("C2", timedelta(minutes=5))
        await cache.set("cart:C1", carts.carts["C1"].to_dict(), 60)

        removed = await expire_carts(carts, cache, lock_service)

        assert removed == 1
        assert list(carts.carts) == ["C2"]
        assert await cache.get("cart:C1") is None

    async def test_skips_cart_under_mutation(self, carts, cache, lock_service):
        carts.carts["C1"] = _cart("C1", timedelta(seconds=-5))
        await lock_service.acquire("cart:C1", 10)

        removed = await expire_carts(carts, cache, lock_service)

        assert removed == 0
        assert "C1" in carts.carts

    async def test_releases_lock(self, carts, cache, lock_service):
        carts.carts["C1"] = _cart("C1", timedelta(seconds=-5))

        await expire_carts(carts, cache, lock_service)

        assert await lock_service.acquire("cart:C1", 10)

    async def test_cart_recreated_meanwhile_is_kept(self, carts, cache, lock_service):
        carts.carts["C1"] = _cart("C1", timedelta(seconds=-5))

        class RecreatingRepo:
            # miedzy wyszukaniem a lockiem klient zalozyl nowy koszyk
            async def find_expired(self, limit=100):
                expired = await carts.find_expired(limit)
                carts.carts["C1"] = _cart("C1", timedelta(minutes=15))
                return expired

            def __getattr__(self, name):
                return getattr(carts, name)

        removed = await expire_carts(RecreatingRepo(), cache, lock_service)

        assert removed == 0
        assert "C1" in carts.carts

    async def test_nothing_to_do(self, carts, cache, lock_service):
        assert await expire_carts(carts, cache, lock_service) == 0
