# cart_service/domain/ports.py
"""
Kontrakty wspolpracownikow uzywanych przez use case'y koszyka.

Implementacje produkcyjne: repozytoria SQLAlchemy, klient HTTP product-service,
Redis (lock, cache), broker Celery (eventy). W testach - odpowiedniki w pamieci.
"""
from typing import Any, Dict, List, Optional, Protocol

from cart_service.domain.cart import Cart
from cart_service.domain.entities import Customer, Order, Product


class CustomerLookup(Protocol):
    async def find_by_id(self, customer_id: str) -> Optional[Customer]: ...


class ProductLookup(Protocol):
    async def find_by_id(self, product_id: str) -> Optional[Product]: ...

    async def update_stock(self, product_id: str, delta: int) -> None: ...


class CartRepository(Protocol):
    async def find_by_customer_id(self, customer_id: str) -> Optional[Cart]: ...

    async def save(self, cart: Cart) -> None: ...

    async def clear(self, customer_id: str, cart_id: Optional[str] = None) -> None: ...

    async def find_expired(self, limit: int = 100) -> List[Cart]: ...


class OrderRepository(Protocol):
    async def save(self, order: Order) -> None: ...

    async def find_by_id(self, order_id: str) -> Optional[Order]: ...


class LockService(Protocol):
    async def acquire(self, key: str, ttl_seconds: int) -> Optional[str]: ...

    async def release(self, key: str, token: str) -> bool: ...

    async def extend(self, key: str, token: str, ttl_seconds: int) -> bool: ...


class CacheService(Protocol):
    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def clear(self) -> None: ...


class EventPublisher(Protocol):
    async def publish(self, event_name: str, payload: Dict[str, Any]) -> None: ...

    async def publish_with_retry(
        self,
        event_name: str,
        payload: Dict[str, Any],
        max_retries: Optional[int] = None,
    ) -> None: ...
