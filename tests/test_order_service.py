from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from cart_service.domain.cart import Cart, CartItem
from cart_service.domain.errors import (
    CartBusyError,
    CustomerInactiveError,
    CustomerNotFoundError,
    EmptyCartError,
    InsufficientStockError,
    OrderNotFoundError,
)
from cart_service.services.order_service import OrderService

from fakes import InMemoryProducts, RecordingEvents


class TestCreateOrder:
    async def test_order_from_cart(self, order_service, cart_service, orders, products, carts, cache, events):
        await cart_service.add_product("C1", "P1", 2)
        await cart_service.add_product("C1", "P2", 1)

        order = await order_service.create_order_from_cart("C1", "ul. Dluga 1, Krakow")

        assert order.id.startswith("ORD-")
        assert order.status == "PENDING"
        assert order.total == Decimal("449.48")
        assert orders.orders[order.id] is order
        assert products.stock_changes == [("P1", -2), ("P2", -1)]
        assert products.products["P2"].stock == 2
        assert "C1" not in carts.carts
        assert await cache.get("cart:C1") is None

        name, payload = events.published[-1]
        assert name == "order.created"
        assert payload["orderId"] == order.id
        assert payload["total"] == "449.48"
        assert [i["productId"] for i in payload["items"]] == ["P1", "P2"]

    async def test_unknown_customer(self, order_service):
        with pytest.raises(CustomerNotFoundError):
            await order_service.create_order_from_cart("C404", "adres")

    async def test_suspended_customer_is_forbidden(self, order_service, carts):
        carts.carts["C9"] = Cart(id="CART-9", customer_id="C9", items=[CartItem("P1", 1)])

        with pytest.raises(CustomerInactiveError) as exc:
            await order_service.create_order_from_cart("C9", "adres")

        assert isinstance(exc.value, PermissionError)
        assert "C9" in carts.carts

    async def test_no_cart(self, order_service):
        with pytest.raises(EmptyCartError):
            await order_service.create_order_from_cart("C1", "adres")

    async def test_empty_cart(self, order_service, carts):
        carts.carts["C1"] = Cart(id="CART-1", customer_id="C1", items=[])

        with pytest.raises(EmptyCartError):
            await order_service.create_order_from_cart("C1", "adres")

    async def test_expired_cart_is_cleared(self, order_service, carts):
        past = datetime.now(timezone.utc) - timedelta(seconds=1)
        carts.carts["C1"] = Cart(id="CART-1", customer_id="C1", items=[CartItem("P1", 1)], expires_at=past)

        with pytest.raises(EmptyCartError):
            await order_service.create_order_from_cart("C1", "adres")

        assert "C1" not in carts.carts

    async def test_stock_checked_again_at_checkout(self, order_service, cart_service, products, orders, carts):
        await cart_service.add_product("C1", "P2", 3)
        products.products["P2"].stock = 1

        with pytest.raises(InsufficientStockError):
            await order_service.create_order_from_cart("C1", "adres")

        assert orders.orders == {}
        assert products.stock_changes == []
        assert "C1" in carts.carts

    async def test_busy_cart(self, order_service, cart_service, lock_service):
        await cart_service.add_product("C1", "P1", 1)
        await lock_service.acquire("cart:C1", 10)

        with pytest.raises(CartBusyError):
            await order_service.create_order_from_cart("C1", "adres")

    async def test_event_failure_keeps_order(
        self, orders, carts, customers, products, cache, lock_service, cart_service, sleep
    ):
        await cart_service.add_product("C1", "P1", 1)
        svc = OrderService(orders, carts, customers, products, cache, lock_service, RecordingEvents(fail=True), sleep=sleep)

        order = await svc.create_order_from_cart("C1", "adres")

        assert order.id in orders.orders
        assert "C1" not in carts.carts


class TestGetOrder:
    async def test_owner_can_read(self, order_service, cart_service):
        await cart_service.add_product("C1", "P1", 1)
        order = await order_service.create_order_from_cart("C1", "adres")

        assert await order_service.get_order(order.id, "C1") is order

    async def test_not_found(self, order_service):
        with pytest.raises(OrderNotFoundError):
            await order_service.get_order("ORD-X", "C1")

    async def test_other_customer_is_forbidden(self, order_service, cart_service):
        await cart_service.add_product("C1", "P1", 1)
        order = await order_service.create_order_from_cart("C1", "adres")

        with pytest.raises(PermissionError):
            await order_service.get_order(order.id, "C2")


class StockRejectingProducts(InMemoryProducts):
    """product-service odrzuca zmiane stanu wybranego produktu (409)."""

    def __init__(self, rejected, *products):
        super().__init__(*products)
        self.rejected = rejected

    async def update_stock(self, product_id, delta):
        if product_id == self.rejected and delta < 0:
            raise InsufficientStockError(product_id, 0, -delta)
        await super().update_stock(product_id, delta)


class TestStockRejectedAtCheckout:
    async def test_no_order_and_stock_restored(self, orders, carts, customers, products, cache, lock_service, events, sleep):
        rejecting = StockRejectingProducts("P2", *products.products.values())
        svc = OrderService(orders, carts, customers, rejecting, cache, lock_service, events, sleep=sleep)
        carts.carts["C1"] = Cart(id="CART-1", customer_id="C1", items=[CartItem("P1", 2), CartItem("P2", 1)])

        with pytest.raises(InsufficientStockError):
            await svc.create_order_from_cart("C1", "adres")

        assert orders.orders == {}
        assert rejecting.stock_changes == [("P1", -2), ("P1", 2)]
        assert rejecting.products["P1"].stock == 10
        assert "C1" in carts.carts
        assert events.published == []
