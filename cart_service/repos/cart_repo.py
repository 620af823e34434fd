# cart_service/repos/cart_repo.py
from datetime import datetime, timezone
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cart_service.data.models.cart import CartModel
from cart_service.domain.cart import Cart, CartItem, as_utc


class CartRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _to_domain(row: CartModel) -> Cart:
        return Cart(
            id=row.id,
            customer_id=row.customer_id,
            items=[CartItem.from_dict(i) for i in (row.items or [])],
            updated_at=as_utc(row.updated_at),
            # sqlite gubi strefe czasowa, postgres nie
            expires_at=as_utc(row.expires_at),
        )

    async def find_by_customer_id(self, customer_id: str) -> Cart | None:
        row = (
            await self.db.execute(select(CartModel).where(CartModel.customer_id == customer_id))
        ).scalar_one_or_none()
        return self._to_domain(row) if row else None

    async def save(self, cart: Cart) -> None:
        #upsert po id koszyka
        await self.db.merge(
            CartModel(
                id=cart.id,
                customer_id=cart.customer_id,
                items=[i.to_dict() for i in cart.items],
                updated_at=cart.updated_at,
                expires_at=cart.expires_at,
            )
        )
        await self.db.commit()

    async def clear(self, customer_id: str, cart_id: str | None = None) -> None:
        stmt = delete(CartModel).where(CartModel.customer_id == customer_id)
        if cart_id is not None:
            # tylko ten konkretny koszyk, nie nowszy zalozony w miedzyczasie
            stmt = stmt.where(CartModel.id == cart_id)
        await self.db.execute(stmt)
        await self.db.commit()

    async def find_expired(self, limit: int = 100) -> List[Cart]:
        now = datetime.now(timezone.utc)
        rows = (
            await self.db.execute(
                select(CartModel)
                .where(CartModel.expires_at.is_not(None), CartModel.expires_at < now)
                .limit(limit)
            )
        ).scalars().all()
        return [self._to_domain(r) for r in rows]
