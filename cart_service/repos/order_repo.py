# cart_service/repos/order_repo.py
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from cart_service.data.models.order import OrderModel
from cart_service.domain.cart import as_utc
from cart_service.domain.entities import Order, OrderItem


class OrderRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, order: Order) -> None:
        await self.db.merge(
            OrderModel(
                id=order.id,
                customer_id=order.customer_id,
                status=order.status,
                items=[
                    {
                        "product_id": i.product_id,
                        "product_name": i.product_name,
                        "quantity": i.quantity,
                        "price": str(i.price),
                    }
                    for i in order.items
                ],
                total=order.total,
                shipping_address=order.shipping_address,
                created_at=order.created_at,
            )
        )
        await self.db.commit()

    async def find_by_id(self, order_id: str) -> Order | None:
        row = await self.db.get(OrderModel, order_id)
        if not row:
            return None
        return Order(
            id=row.id,
            customer_id=row.customer_id,
            items=[
                OrderItem(
                    product_id=i["product_id"],
                    product_name=i["product_name"],
                    quantity=int(i["quantity"]),
                    price=Decimal(i["price"]),
                )
                for i in row.items
            ],
            shipping_address=row.shipping_address,
            status=row.status,
            created_at=as_utc(row.created_at),
        )
