from sqlalchemy.ext.asyncio import AsyncSession

from cart_service.data.models.customer import CustomerModel
from cart_service.domain.cart import as_utc
from cart_service.domain.entities import Customer


class CustomerRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, customer_id: str) -> Customer | None:
        row = await self.db.get(CustomerModel, customer_id)
        if not row:
            return None
        return Customer(
            id=row.id,
            name=row.name,
            email=row.email,
            status=row.status,
            created_at=as_utc(row.created_at),
        )

    async def create(self, customer: Customer) -> Customer:
        self.db.add(
            CustomerModel(
                id=customer.id,
                name=customer.name,
                email=customer.email,
                status=customer.status,
                created_at=customer.created_at,
            )
        )
        await self.db.commit()
        return customer
