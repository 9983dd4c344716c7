"""API Dependencies"""

from fastapi import Request

from app.core.exceptions import StoreUnavailable
from app.database import AsyncSessionLocal, get_db  # noqa: F401
from app.services.billing_service import BillingService
from app.services.email_service import EmailNotifier
from app.services.receipt_service import ReceiptRenderer
from app.services.storage_service import build_receipt_storage
from app.services.stores import SqlBillStore, SqlInventoryStore


def build_billing_service(session_factory=AsyncSessionLocal) -> BillingService:
    """Wire the billing engine to the SQL stores, reportlab and Resend"""
    return BillingService(
        inventory=SqlInventoryStore(session_factory),
        bills=SqlBillStore(session_factory),
        renderer=ReceiptRenderer(),
        receipts=build_receipt_storage(),
        notifier=EmailNotifier(),
    )


def get_billing_service(request: Request) -> BillingService:
    """
    Billing engine installed on app state at startup.

    Raises:
        StoreUnavailable: if startup has not finished connecting the stores
    """
    service = getattr(request.app.state, "billing_service", None)
    if service is None:
        raise StoreUnavailable("Billing store is not initialized yet")
    return service


def get_notifier() -> EmailNotifier:
    return EmailNotifier()
