# cart_service/domain/entities.py
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List

from cart_service.domain.cart import utcnow

CUSTOMER_ACTIVE = "ACTIVE"
CUSTOMER_INACTIVE = "INACTIVE"
CUSTOMER_SUSPENDED = "SUSPENDED"
CUSTOMER_STATUSES = (CUSTOMER_ACTIVE, CUSTOMER_INACTIVE, CUSTOMER_SUSPENDED)

ORDER_PENDING = "PENDING"


@dataclass
class Customer:
    id: str
    name: str
    email: str | None = None
    status: str = CUSTOMER_ACTIVE
    created_at: datetime = field(default_factory=utcnow)

    def can_place_order(self) -> bool:
        return self.status == CUSTOMER_ACTIVE


@dataclass
class Product:
    id: str
    name: str
    price: Decimal
    stock: int
    category: str = ""

    def has_stock(self, quantity: int) -> bool:
        return self.stock >= quantity


@dataclass
class OrderItem:
    product_id: str
    product_name: str
    quantity: int
    price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class Order:
    id: str
    customer_id: str
    items: List[OrderItem]
    shipping_address: str
    status: str = ORDER_PENDING
    created_at: datetime = field(default_factory=utcnow)

    @property
    def total(self) -> Decimal:
        return sum((i.subtotal for i in self.items), Decimal("0.00"))
