from fastapi import APIRouter, Depends

from cart_service.api.deps import get_customer_service
from cart_service.domain.schemas import ApiResponse, CustomerCreate, CustomerRead
from cart_service.services.customer_service import CustomerService

router = APIRouter(prefix="/customers", tags=["customers"])


@router.post("", response_model=ApiResponse[CustomerRead], status_code=201)
async def create_customer(payload: CustomerCreate, svc: CustomerService = Depends(get_customer_service)):
    customer = await svc.create_customer(payload.id, payload.name, payload.email, payload.status)
    return ApiResponse[CustomerRead](data=CustomerRead.model_validate(customer))


@router.get("/{customer_id}", response_model=ApiResponse[CustomerRead])
async def get_customer(customer_id: str, svc: CustomerService = Depends(get_customer_service)):
    customer = await svc.get_customer(customer_id)
    return ApiResponse[CustomerRead](data=CustomerRead.model_validate(customer))
