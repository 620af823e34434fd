from sqlalchemy import Column, String, DateTime, Numeric, JSON
from datetime import datetime, timezone

from cart_service.data.database import Base

class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)
    customer_id = Column(String(64), nullable=False, index=True)

    status = Column(String, nullable=False, default="PENDING")
    # [{"product_id", "product_name", "quantity", "price"}]
    items = Column(JSON, nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    shipping_address = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
