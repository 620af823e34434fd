import asyncio
import time
import uuid
from datetime import timedelta

from cart_service.domain.cart import Cart, utcnow
from cart_service.domain.errors import (
    CartItemNotFoundError,
    CartNotFoundError,
    CartValidationError,
    CustomerNotFoundError,
    InsufficientStockError,
    ProductNotFoundError,
)
from cart_service.domain.ports import (
    CacheService,
    CartRepository,
    CustomerLookup,
    EventPublisher,
    LockService,
    ProductLookup,
)
from cart_service.services.cart_lock import cart_key, hold_cart_lock
from cart_service.utils.settings import CART_TTL_SECONDS
from cart_service.utils.logging import get_logger

logger = get_logger(__name__)


def generate_cart_id() -> str:
    return f"CART-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class CartService:
    """
    Use case'y dla domeny cart.
    commands (add, remove) modyfikuja stan pod lockiem na klienta
    query (get) tylko odczyt, cache-aside z kontrola wygasniecia
    """

    def __init__(
        self,
        carts: CartRepository,
        customers: CustomerLookup,
        products: ProductLookup,
        cache: CacheService,
        lock_service: LockService,
        events: EventPublisher,
        sleep=asyncio.sleep,
    ):
        self.carts = carts
        self.customers = customers
        self.products = products
        self.cache = cache
        self.lock_service = lock_service
        self.events = events
        self._sleep = sleep

    #query - odczyt
    async def get_cart(self, customer_id: str) -> Cart:
        """
        Cache-aside bez locka.

        Wygasly koszyk jest czyszczony po id ze zrobionego odczytu, wiec
        rownolegle add, ktore w miedzyczasie zalozylo nowy koszyk, go nie traci.
        """
        key = cart_key(customer_id)

        cached = await self.cache.get(key)
        if cached is not None:
            # z cache przychodzi dict z datami jako stringi
            cart = Cart.from_dict(cached)
            if cart.is_expired():
                logger.info(f"Koszyk {cart.id} klienta {customer_id} z cache wygasl, czyszcze")
                await self._clear(cart)
                return Cart.empty(customer_id)
            return cart

        cart = await self.carts.find_by_customer_id(customer_id)
        if cart is None:
            return Cart.empty(customer_id)

        if cart.is_expired():
            logger.info(f"Koszyk {cart.id} klienta {customer_id} wygasl, czyszcze")
            await self._clear(cart)
            return Cart.empty(customer_id)

        await self._write_cache(cart)
        return cart

    #commands
    async def add_product(self, customer_id: str, product_id: str, quantity: int) -> Cart:
        if quantity <= 0:
            raise CartValidationError("Ilosc musi byc wieksza niz 0")

        async with hold_cart_lock(self.lock_service, customer_id, sleep=self._sleep):
            customer = await self.customers.find_by_id(customer_id)
            if not customer:
                raise CustomerNotFoundError(customer_id)

            product = await self.products.find_by_id(product_id)
            if not product:
                raise ProductNotFoundError(product_id)
            if not product.has_stock(quantity):
                raise InsufficientStockError(product_id, product.stock, quantity)

            cart = await self.carts.find_by_customer_id(customer_id)

            if cart and cart.is_expired():
                logger.info(f"Koszyk {cart.id} klienta {customer_id} wygasl, tworze nowy")
                await self._clear(cart)
                cart = None

            if cart is None:
                now = utcnow()
                cart = Cart(
                    id=generate_cart_id(),
                    customer_id=customer_id,
                    items=[],
                    updated_at=now,
                    expires_at=now + timedelta(seconds=CART_TTL_SECONDS),
                )
                logger.info(f"Utworzono nowy koszyk {cart.id} dla klienta {customer_id}")

            cart.add_item(product_id, quantity)
            cart.updated_at = utcnow()

            await self.carts.save(cart)
            await self._write_cache(cart)

            # cache produktow zostaje - dodanie do koszyka nie zmienia stanu magazynu,
            # ten zmienia sie dopiero przy zamowieniu

            logger.info(f"Produkt {product_id} x{quantity} dodany do koszyka {cart.id}")

        # event juz po zwolnieniu locka, broker nie wydluza sekcji krytycznej
        await self._publish(
            "cart.updated",
            {
                "cartId": cart.id,
                "customerId": customer_id,
                "productId": product_id,
                "quantity": quantity,
                "action": "add",
                "expiresAt": cart.expires_at.isoformat() if cart.expires_at else None,
            },
        )
        return cart

    async def remove_product(self, customer_id: str, product_id: str) -> Cart:
        async with hold_cart_lock(self.lock_service, customer_id, sleep=self._sleep):
            cart = await self.carts.find_by_customer_id(customer_id)

            if cart is None:
                raise CartNotFoundError(customer_id)

            if cart.is_expired():
                # tak samo jak przy dodawaniu: wygasly koszyk = brak koszyka
                logger.info(f"Koszyk {cart.id} klienta {customer_id} wygasl, czyszcze")
                await self._clear(cart)
                raise CartNotFoundError(customer_id)

            if not cart.has_item(product_id):
                raise CartItemNotFoundError(product_id)

            updated = Cart(
                id=cart.id,
                customer_id=cart.customer_id,
                items=cart.remove_item(product_id),
                updated_at=utcnow(),
                expires_at=cart.expires_at,
            )

            await self.carts.save(updated)
            # TTL liczony od dotychczasowego expires_at, usuniecie nie przedluza koszyka
            await self._write_cache(updated)

            logger.info(f"Produkt {product_id} usuniety z koszyka {updated.id}")

        await self._publish(
            "cart.updated",
            {
                "cartId": updated.id,
                "customerId": customer_id,
                "productId": product_id,
                "action": "remove",
            },
        )
        return updated

    async def _clear(self, cart: Cart) -> None:
        await self.carts.clear(cart.customer_id, cart_id=cart.id)
        await self.cache.delete(cart_key(cart.customer_id))

    async def _write_cache(self, cart: Cart) -> None:
        ttl = cart.remaining_ttl_seconds()
        if ttl <= 0:
            # bez expires_at albo juz po terminie - nie trzymamy w cache
            await self.cache.delete(cart_key(cart.customer_id))
            return
        await self.cache.set(cart_key(cart.customer_id), cart.to_dict(), ttl)

    async def _publish(self, event_name: str, payload: dict) -> None:
        try:
            await self.events.publish(event_name, payload)
        except Exception as e:
            logger.error(f"Nie udalo sie opublikowac {event_name}: {e}")
