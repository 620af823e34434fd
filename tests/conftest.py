# tests/conftest.py
import os

# przed importem cart_service, silnik bazy tworzy sie przy imporcie
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from decimal import Decimal

import pytest
from fakeredis import aioredis

from cart_service.domain.entities import CUSTOMER_SUSPENDED, Customer, Product
from cart_service.services.cache_service import CacheService
from cart_service.services.cart_service import CartService
from cart_service.services.lock_service import LockService
from cart_service.services.order_service import OrderService

from fakes import (
    InMemoryCartRepo,
    InMemoryCustomers,
    InMemoryOrders,
    InMemoryProducts,
    RecordingEvents,
    RecordingSleep,
    SpyCache,
)


@pytest.fixture
def customers():
    return InMemoryCustomers(
        Customer(id="C1", name="Anna"),
        Customer(id="C2", name="Piotr"),
        Customer(id="C9", name="Zawieszony", status=CUSTOMER_SUSPENDED),
    )


@pytest.fixture
def products():
    return InMemoryProducts(
        Product(id="P1", name="Keyboard", price=Decimal("199.99"), stock=10, category="peripherals"),
        Product(id="P2", name="Mouse", price=Decimal("49.50"), stock=3, category="peripherals"),
    )


@pytest.fixture
def carts():
    return InMemoryCartRepo()


@pytest.fixture
def orders():
    return InMemoryOrders()


@pytest.fixture
def cache():
    return SpyCache(CacheService())


@pytest.fixture
def lock_service():
    return LockService()


@pytest.fixture
def events():
    return RecordingEvents()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def cart_service(carts, customers, products, cache, lock_service, events, sleep):
    return CartService(
        carts=carts,
        customers=customers,
        products=products,
        cache=cache,
        lock_service=lock_service,
        events=events,
        sleep=sleep,
    )


@pytest.fixture
def order_service(orders, carts, customers, products, cache, lock_service, events, sleep):
    return OrderService(
        orders=orders,
        carts=carts,
        customers=customers,
        products=products,
        cache=cache,
        lock_service=lock_service,
        events=events,
        sleep=sleep,
    )


@pytest.fixture
async def fake_redis():
    client = aioredis.FakeRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()
