"""Billing Endpoints"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.api import deps
from app.schemas.billing import BillingRequest, BillResponse, BillResult, ReceiptResponse
from app.schemas.responses import SuccessResponse
from app.services.billing_service import BillingService

router = APIRouter()


@router.post("", response_model=SuccessResponse[BillResult], status_code=status.HTTP_201_CREATED)
async def create_bill(
    bill_in: BillingRequest,
    billing: BillingService = Depends(deps.get_billing_service),
) -> Any:
    """
    Bill a purchase: check stock, take it, save the bill, render the receipt
    and optionally email it. Receipt and email problems come back as
    warnings; the bill is final once saved.
    """
    result = await billing.place_order(bill_in.items, notify_email=bill_in.email)
    message = "Bill generated and saved successfully"
    if result.warnings:
        message = "Bill saved with warnings"
    return SuccessResponse(data=result, message=message)


@router.get("/{bill_id}", response_model=SuccessResponse[BillResponse])
async def get_bill(
    bill_id: UUID,
    billing: BillingService = Depends(deps.get_billing_service),
) -> Any:
    bill = await billing.get_bill(bill_id)
    return SuccessResponse(data=bill)


@router.post("/{bill_id}/receipt", response_model=SuccessResponse[ReceiptResponse])
async def regenerate_receipt(
    bill_id: UUID,
    billing: BillingService = Depends(deps.get_billing_service),
) -> Any:
    """Render a stored bill's receipt again (same content every time)."""
    download_url = await billing.regenerate_receipt(bill_id)
    return SuccessResponse(
        data=ReceiptResponse(bill_id=bill_id, download_url=download_url),
        message="Receipt regenerated"
    )
