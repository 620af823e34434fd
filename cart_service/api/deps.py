# cart_service/api/deps.py
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cart_service.data.database import get_db
from cart_service.repos.cart_repo import CartRepo
from cart_service.repos.customer_repo import CustomerRepo
from cart_service.repos.order_repo import OrderRepo
from cart_service.services.cart_service import CartService
from cart_service.services.customer_service import CustomerService
from cart_service.services.order_service import OrderService


#wspoldzielone obiekty (lock, cache, eventy, klient produktow) sa w app.state,
#repozytoria zyja tyle co sesja zadania

def get_cart_service(request: Request, db: AsyncSession = Depends(get_db)) -> CartService:
    state = request.app.state
    return CartService(
        carts=CartRepo(db),
        customers=CustomerRepo(db),
        products=state.product_client,
        cache=state.cache,
        lock_service=state.lock_service,
        events=state.events,
    )


def get_order_service(request: Request, db: AsyncSession = Depends(get_db)) -> OrderService:
    state = request.app.state
    return OrderService(
        orders=OrderRepo(db),
        carts=CartRepo(db),
        customers=CustomerRepo(db),
        products=state.product_client,
        cache=state.cache,
        lock_service=state.lock_service,
        events=state.events,
    )


def get_customer_service(db: AsyncSession = Depends(get_db)) -> CustomerService:
    return CustomerService(CustomerRepo(db))
