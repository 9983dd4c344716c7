"""Product Pydantic Schemas"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

# products.id and products.stock are 32-bit INTEGER columns
MAX_INT = 2_147_483_647


class ProductCreate(BaseModel):
    """All fields are required; prices and stock must be numeric"""
    id: int = Field(..., gt=0, le=MAX_INT)
    name: str = Field(..., min_length=1, max_length=255)
    buying_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    selling_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    stock: int = Field(..., ge=0, le=MAX_INT)


class ProductUpdate(BaseModel):
    """Partial update; at least one field must be present"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    buying_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    selling_price: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0, le=MAX_INT)

    @model_validator(mode="after")
    def check_not_empty(self) -> "ProductUpdate":
        if not self.model_dump(exclude_none=True):
            raise ValueError("At least one field must be provided")
        return self


class ProductResponse(BaseModel):
    id: int
    name: str
    buying_price: Decimal
    selling_price: Decimal
    stock: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LowStockReport(BaseModel):
    """Outcome of a low-stock sweep"""
    threshold: int
    products: List[ProductResponse] = Field(default_factory=list)
    notified: bool = False
    message: str
