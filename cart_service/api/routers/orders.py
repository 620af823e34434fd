# cart_service/api/routers/orders.py
from fastapi import APIRouter, Depends, Query

from cart_service.api.deps import get_order_service
from cart_service.domain.schemas import ApiResponse, OrderCreate, OrderOut
from cart_service.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=ApiResponse[OrderOut], status_code=201)
async def create_order(
    payload: OrderCreate,
    customer_id: str = Query(...),
    svc: OrderService = Depends(get_order_service),
):
    """
    Tworzy zamowienie z aktualnego koszyka klienta i czysci koszyk.
    """
    order = await svc.create_order_from_cart(customer_id, payload.shipping_address)
    return ApiResponse[OrderOut](data=OrderOut.model_validate(order))


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
async def get_order(
    order_id: str,
    customer_id: str = Query(...),
    svc: OrderService = Depends(get_order_service),
):
    order = await svc.get_order(order_id, customer_id)
    return ApiResponse[OrderOut](data=OrderOut.model_validate(order))
