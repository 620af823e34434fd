# tests/fakes.py
import asyncio
import copy
from datetime import datetime, timezone
from typing import Any, Dict, List

from cart_service.domain.cart import Cart
from cart_service.domain.entities import Customer, Order, Product


class InMemoryCartRepo:
    """Koszyki w slowniku; kopie przy zapisie i odczycie jak przy prawdziwej bazie."""

    def __init__(self, delay: float = 0):
        self.carts: Dict[str, Cart] = {}
        self.delay = delay
        self.saves = 0

    async def find_by_customer_id(self, customer_id: str):
        if self.delay:
            await asyncio.sleep(self.delay)
        cart = self.carts.get(customer_id)
        return copy.deepcopy(cart) if cart else None

    async def save(self, cart: Cart) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.saves += 1
        self.carts[cart.customer_id] = copy.deepcopy(cart)

    async def clear(self, customer_id: str, cart_id=None) -> None:
        cart = self.carts.get(customer_id)
        if cart is not None and (cart_id is None or cart.id == cart_id):
            del self.carts[customer_id]

    async def find_expired(self, limit: int = 100) -> List[Cart]:
        now = datetime.now(timezone.utc)
        expired = [c for c in self.carts.values() if c.expires_at and c.expires_at < now]
        return copy.deepcopy(expired[:limit])


class InMemoryCustomers:
    def __init__(self, *customers: Customer):
        self.customers = {c.id: c for c in customers}

    async def find_by_id(self, customer_id: str):
        return self.customers.get(customer_id)


class InMemoryProducts:
    def __init__(self, *products: Product):
        self.products = {p.id: p for p in products}
        self.stock_changes: List[tuple] = []

    async def find_by_id(self, product_id: str):
        product = self.products.get(product_id)
        return copy.copy(product) if product else None

    async def update_stock(self, product_id: str, delta: int) -> None:
        self.stock_changes.append((product_id, delta))
        self.products[product_id].stock += delta


class InMemoryOrders:
    def __init__(self):
        self.orders: Dict[str, Order] = {}

    async def save(self, order: Order) -> None:
        self.orders[order.id] = order

    async def find_by_id(self, order_id: str):
        return self.orders.get(order_id)


class RecordingEvents:
    def __init__(self, fail: bool = False):
        self.published: List[tuple] = []
        self.fail = fail

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None:
        if self.fail:
            raise ConnectionError("broker down")
        self.published.append((event_name, payload))

    async def publish_with_retry(self, event_name: str, payload: Dict[str, Any], max_retries=None) -> None:
        await self.publish(event_name, payload)


class RecordingSleep:
    """Zamiast asyncio.sleep - zapisuje opoznienia, nie czeka."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class SpyCache:
    """Opakowanie CacheService zapisujace TTL kazdego set()."""

    def __init__(self, inner):
        self.inner = inner
        self.ttls: Dict[str, Any] = {}

    @property
    def fallback_mode(self):
        return self.inner.fallback_mode

    async def get(self, key):
        return await self.inner.get(key)

    async def set(self, key, value, ttl_seconds=None):
        self.ttls[key] = ttl_seconds
        await self.inner.set(key, value, ttl_seconds)

    async def delete(self, key):
        await self.inner.delete(key)

    async def clear(self):
        await self.inner.clear()


class BrokenRedis:
    """Klient redis, ktory zawsze zglasza blad polaczenia."""

    async def _fail(self, *args, **kwargs):
        import redis

        raise redis.ConnectionError("connection refused")

    ping = set = get = delete = eval = ttl = flushdb = _fail

    async def aclose(self):
        return None
