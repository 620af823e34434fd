#cart_service/data/models/cart.py
from sqlalchemy import Column, String, DateTime, JSON

from cart_service.data.database import Base


class CartModel(Base):
    __tablename__ = "carts"

    id = Column(String(64), primary_key=True)
    # jeden zywy koszyk na klienta
    customer_id = Column(String(64), nullable=False, unique=True, index=True)

    # [{"product_id": ..., "quantity": ..., "reserved_until": ...}]
    items = Column(JSON, nullable=False, default=list)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
