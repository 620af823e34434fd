from sqlalchemy import Column, String, DateTime
from datetime import datetime, timezone

from cart_service.data.database import Base


class CustomerModel(Base):
    __tablename__ = "customers"

    id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    status = Column(String(20), nullable=False, default="ACTIVE")  # ACTIVE, INACTIVE, SUSPENDED
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
