#cart_service/api/routers/carts.py
from fastapi import APIRouter, Depends, Query

from cart_service.api.deps import get_cart_service
from cart_service.domain.schemas import ApiResponse, CartOut, ItemIn, ItemRemoveIn
from cart_service.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("/me", response_model=ApiResponse[CartOut])
async def get_my_cart(
    customer_id: str = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    cart = await svc.get_cart(customer_id)
    return ApiResponse[CartOut](data=CartOut.model_validate(cart))


@router.post("", response_model=ApiResponse[CartOut], status_code=201)
async def add_item(
    payload: ItemIn,
    customer_id: str = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    cart = await svc.add_product(
        customer_id=customer_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )
    return ApiResponse[CartOut](data=CartOut.model_validate(cart))


@router.delete("/item", response_model=ApiResponse[CartOut])
async def remove_item(
    payload: ItemRemoveIn,
    customer_id: str = Query(...),
    svc: CartService = Depends(get_cart_service),
):
    cart = await svc.remove_product(customer_id, payload.product_id)
    return ApiResponse[CartOut](data=CartOut.model_validate(cart))
