# cart_service/domain/cart.py
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(value) -> datetime | None:
    # z cache daty wracaja jako stringi ISO
    if value is None or isinstance(value, datetime):
        return as_utc(value)
    return as_utc(datetime.fromisoformat(value))


def as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class CartItem:
    product_id: str
    quantity: int
    reserved_until: datetime | None = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"product_id": self.product_id, "quantity": self.quantity}
        if self.reserved_until is not None:
            data["reserved_until"] = self.reserved_until.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartItem":
        return cls(
            product_id=str(data["product_id"]),
            quantity=int(data["quantity"]),
            reserved_until=_parse_dt(data.get("reserved_until")),
        )


@dataclass
class Cart:
    """
    Koszyk klienta, jeden zywy koszyk na klienta.

    expires_at = None oznacza koszyk bez terminu waznosci (np. pusty koszyk
    odtworzony z pustej odpowiedzi).
    """

    id: str | None
    customer_id: str
    items: List[CartItem] = field(default_factory=list)
    updated_at: datetime = field(default_factory=utcnow)
    expires_at: datetime | None = None

    def add_item(self, product_id: str, quantity: int) -> List[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                item.quantity += quantity
                return self.items

        self.items.append(CartItem(product_id=product_id, quantity=quantity))
        return self.items

    def remove_item(self, product_id: str) -> List[CartItem]:
        return [item for item in self.items if item.product_id != product_id]

    def has_item(self, product_id: str) -> bool:
        return any(item.product_id == product_id for item in self.items)

    def is_empty(self) -> bool:
        return not self.items

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utcnow()) > self.expires_at

    def remaining_ttl_seconds(self, now: datetime | None = None) -> int:
        if self.expires_at is None:
            return 0
        diff = (self.expires_at - (now or utcnow())).total_seconds()
        return max(0, math.floor(diff))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "items": [item.to_dict() for item in self.items],
            "updated_at": self.updated_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cart":
        return cls(
            id=data.get("id"),
            customer_id=str(data["customer_id"]),
            items=[CartItem.from_dict(i) for i in data.get("items", [])],
            updated_at=_parse_dt(data.get("updated_at")) or utcnow(),
            expires_at=_parse_dt(data.get("expires_at")),
        )

    @classmethod
    def empty(cls, customer_id: str) -> "Cart":
        return cls(id=None, customer_id=customer_id, items=[], updated_at=utcnow())
