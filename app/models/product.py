"""Inventory: Product Model"""

from sqlalchemy import CheckConstraint, Column, Integer, Numeric, String

from app.database import Base
from app.models.base import TimestampMixin


class Product(Base, TimestampMixin):
    """
    A stocked product. The id is an external key supplied by the shop
    (barcode / shelf number), not generated here.
    """
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=False)
    buying_price = Column(Numeric(12, 2), nullable=False)
    selling_price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0, index=True)

    def __repr__(self) -> str:
        return f"<Product {self.id} {self.name} (stock={self.stock})>"
