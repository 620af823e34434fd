# cart_service/services/order_service.py
import asyncio
import time
import uuid

from cart_service.domain.cart import Cart
from cart_service.domain.entities import Order, OrderItem
from cart_service.domain.errors import (
    CustomerInactiveError,
    CustomerNotFoundError,
    EmptyCartError,
    InsufficientStockError,
    OrderNotFoundError,
    ProductNotFoundError,
)
from cart_service.domain.ports import (
    CacheService,
    CartRepository,
    CustomerLookup,
    EventPublisher,
    LockService,
    OrderRepository,
    ProductLookup,
)
from cart_service.services.cart_lock import cart_key, hold_cart_lock
from cart_service.utils.logging import get_logger

logger = get_logger(__name__)


def generate_order_id() -> str:
    return f"ORD-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Separacja od CartService, wspolny jest tylko lock na koszyk klienta.
    """

    def __init__(
        self,
        orders: OrderRepository,
        carts: CartRepository,
        customers: CustomerLookup,
        products: ProductLookup,
        cache: CacheService,
        lock_service: LockService,
        events: EventPublisher,
        sleep=asyncio.sleep,
    ):
        self.orders = orders
        self.carts = carts
        self.customers = customers
        self.products = products
        self.cache = cache
        self.lock_service = lock_service
        self.events = events
        self._sleep = sleep

    async def create_order_from_cart(self, customer_id: str, shipping_address: str) -> Order:
        """
        Use Case: Tworzenie zamowienia z koszyka.

        1. Lock na koszyk klienta (ta sama polityka co add/remove)
        2. Weryfikuje klienta, koszyk i stany magazynowe
        3. Zapisuje zamowienie i zmniejsza stany
        4. Czysci koszyk (baza + cache)
        5. Publikuje order.created z retry
        """
        async with hold_cart_lock(self.lock_service, customer_id, sleep=self._sleep):
            customer = await self.customers.find_by_id(customer_id)
            if not customer:
                raise CustomerNotFoundError(customer_id)
            if not customer.can_place_order():
                raise CustomerInactiveError(customer_id, customer.status)

            cart = await self.carts.find_by_customer_id(customer_id)
            if cart and cart.is_expired():
                await self._clear_cart(cart)
                cart = None

            if cart is None or cart.is_empty():
                raise EmptyCartError(customer_id)

            items = []
            for cart_item in cart.items:
                product = await self.products.find_by_id(cart_item.product_id)
                if not product:
                    raise ProductNotFoundError(cart_item.product_id)
                if not product.has_stock(cart_item.quantity):
                    raise InsufficientStockError(product.id, product.stock, cart_item.quantity)

                items.append(
                    OrderItem(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=cart_item.quantity,
                        price=product.price,
                    )
                )

            order = Order(
                id=generate_order_id(),
                customer_id=customer_id,
                items=items,
                shipping_address=shipping_address,
            )

            # najpierw stany - odrzucenie przez product-service nie zostawia zamowienia
            await self._reserve_stock(items)
            await self.orders.save(order)
            logger.info(f"Order {order.id} created from cart {cart.id}")

            await self._clear_cart(cart)

        try:
            await self.events.publish_with_retry(
                "order.created",
                {
                    "orderId": order.id,
                    "customerId": order.customer_id,
                    "total": str(order.total),
                    "items": [
                        {
                            "productId": i.product_id,
                            "productName": i.product_name,
                            "quantity": i.quantity,
                            "price": str(i.price),
                            "subtotal": str(i.subtotal),
                        }
                        for i in order.items
                    ],
                    "status": order.status,
                },
            )
        except Exception as e:
            # zamowienie juz zapisane, event jest w dlq
            logger.error(f"Event order.created dla {order.id} nie zostal dostarczony: {e}")

        return order

    async def get_order(self, order_id: str, customer_id: str) -> Order:
        """
        Use Case: Pobranie zamowienia (Query).
        """
        order = await self.orders.find_by_id(order_id)

        if not order:
            raise OrderNotFoundError(order_id)

        if order.customer_id != customer_id:
            raise PermissionError("Brak dostepu do zamowienia")

        return order

    async def _reserve_stock(self, items: list) -> None:
        applied = []
        try:
            for item in items:
                await self.products.update_stock(item.product_id, -item.quantity)
                applied.append(item)
        except Exception:
            for item in reversed(applied):
                try:
                    await self.products.update_stock(item.product_id, item.quantity)
                except Exception as e:
                    logger.error(f"Nie udalo sie przywrocic stanu {item.product_id} (+{item.quantity}): {e}")
            raise

    async def _clear_cart(self, cart: Cart) -> None:
        await self.carts.clear(cart.customer_id, cart_id=cart.id)
        await self.cache.delete(cart_key(cart.customer_id))
