"""Models Package - Export all models for easy imports"""

from app.models.base import BaseModel, TimestampMixin
from app.models.product import Product
from app.models.bill import Bill
from app.models.user import User


__all__ = [
    # Base classes
    "BaseModel",
    "TimestampMixin",

    # Inventory
    "Product",

    # Billing
    "Bill",

    # Auth
    "User",
]
