"""Billing: Bill Model"""

import uuid
from sqlalchemy import Column, DateTime, JSON, Numeric
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base
from app.utils.time import get_utc_now


class Bill(Base):
    """
    A completed purchase. Written once, never updated.

    ``items`` holds the billed line items as a JSON document
    (product_id, name, unit_price, qty, subtotal) with prices snapshotted
    at billing time, so products can change or disappear without
    touching historical bills.
    """
    __tablename__ = "bills"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    items = Column(JSON, nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=get_utc_now, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Bill {self.id} total={self.total}>"
