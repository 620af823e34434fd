# cart_service/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Generic, List, Optional, TypeVar
from decimal import Decimal
from datetime import datetime

from cart_service.domain.entities import CUSTOMER_ACTIVE

T = TypeVar("T")


class ErrorOut(BaseModel):
    message: str
    statusCode: int


class ApiResponse(BaseModel, Generic[T]):
    """Wspolna koperta odpowiedzi: {success, data?, error?}."""

    success: bool = True
    data: Optional[T] = None
    error: Optional[ErrorOut] = None


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: str = Field(..., min_length=1, description="ID produktu")
    quantity: int = Field(..., gt=0, description="Ilosc produktu (musi byc > 0)")


class ItemRemoveIn(BaseModel):
    product_id: str = Field(..., min_length=1, description="ID produktu")


class CartItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    quantity: int
    reserved_until: datetime | None = None


class CartOut(BaseModel):
    """Schema dla koszyka (response). Pusty koszyk ma id = None."""

    model_config = ConfigDict(from_attributes=True)

    id: str | None
    customer_id: str
    items: List[CartItemOut]
    updated_at: datetime
    expires_at: datetime | None = None


class OrderCreate(BaseModel):
    shipping_address: str = Field(..., min_length=1, max_length=500)


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    product_name: str
    quantity: int
    price: Decimal
    subtotal: Decimal


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_id: str
    status: str
    items: List[OrderItemOut]
    total: Decimal
    shipping_address: str
    created_at: datetime


class CustomerCreate(BaseModel):
    """Schema dla tworzenia klienta."""

    id: str = Field(..., min_length=1, max_length=64, description="ID klienta")
    name: str = Field(..., min_length=1, max_length=100, description="Imie klienta")
    email: str | None = Field(None, max_length=255)
    status: str = Field(CUSTOMER_ACTIVE, pattern="^(ACTIVE|INACTIVE|SUSPENDED)$")


class CustomerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str | None = None
    status: str
