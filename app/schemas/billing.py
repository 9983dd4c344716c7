"""Billing Pydantic Schemas"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field

from app.schemas.product import MAX_INT


class BillRequestItem(BaseModel):
    """One requested product and quantity"""
    product_id: int = Field(..., gt=0, le=MAX_INT, validation_alias=AliasChoices("product_id", "productId"))
    qty: int = Field(..., gt=0, le=MAX_INT)


class BillingRequest(BaseModel):
    items: List[BillRequestItem] = Field(..., min_length=1)
    email: Optional[EmailStr] = None


class BilledLineItem(BaseModel):
    """A priced line item; unit_price is the selling price at billing time"""
    product_id: int
    name: str
    unit_price: Decimal
    qty: int
    subtotal: Decimal

    model_config = ConfigDict(frozen=True)


class BillResult(BaseModel):
    """Outcome of a successful purchase"""
    bill_id: UUID
    items: List[BilledLineItem]
    total: Decimal
    created_at: datetime
    download_url: Optional[str] = None
    emailed: bool = False
    warnings: List[str] = Field(default_factory=list)


class BillResponse(BaseModel):
    """A stored bill"""
    id: UUID
    items: List[BilledLineItem]
    total: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReceiptResponse(BaseModel):
    bill_id: UUID
    download_url: str
