from cart_service.domain.entities import CUSTOMER_ACTIVE, Customer
from cart_service.domain.errors import CustomerNotFoundError
from cart_service.repos.customer_repo import CustomerRepo


class CustomerService:
    def __init__(self, repo: CustomerRepo):
        self.repo = repo

    async def create_customer(self, customer_id: str, name: str, email: str | None = None,
                              status: str = CUSTOMER_ACTIVE) -> Customer:
        existing = await self.repo.find_by_id(customer_id)
        if existing:
            return existing

        return await self.repo.create(
            Customer(id=customer_id, name=name, email=email, status=status)
        )

    async def get_customer(self, customer_id: str) -> Customer:
        customer = await self.repo.find_by_id(customer_id)
        if not customer:
            raise CustomerNotFoundError(customer_id)
        return customer
