"""Application error taxonomy.

Every error carries a stable ``code`` that callers branch on, a human
readable ``message`` and a ``context`` dict with the values that caused it.
The API layer maps these onto ``ErrorResponse`` envelopes using
``status_code``.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for all domain errors"""

    code = "APP_ERROR"
    status_code = 500

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return self.message


class ValidationError(AppError):
    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404


class ProductNotFound(NotFoundError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        super().__init__(
            f"Product ID {product_id} not found.",
            {"product_id": product_id},
        )
        self.product_id = product_id


class BillNotFound(NotFoundError):
    code = "BILL_NOT_FOUND"

    def __init__(self, bill_id: Any):
        super().__init__(f"Bill {bill_id} not found.", {"bill_id": str(bill_id)})
        self.bill_id = bill_id


class ConflictError(AppError):
    code = "CONFLICT"
    status_code = 409


class ProductAlreadyExists(ConflictError):
    code = "PRODUCT_EXISTS"

    def __init__(self, product_id: int):
        super().__init__(
            f"Product ID {product_id} already exists.",
            {"product_id": product_id},
        )


class DuplicateEmail(ConflictError):
    code = "EMAIL_EXISTS"

    def __init__(self):
        super().__init__("Email already exists")


class InvalidCredentials(AppError):
    """Raised for both unknown email and wrong password."""

    code = "INVALID_CREDENTIALS"
    status_code = 401

    def __init__(self):
        super().__init__("Invalid email or password")


class InsufficientStock(AppError):
    code = "INSUFFICIENT_STOCK"
    status_code = 409

    def __init__(
        self,
        product_id: int,
        available: Optional[int],
        requested: int,
        name: Optional[str] = None,
    ):
        label = f'"{name}"' if name else f"product {product_id}"
        if available is None:
            message = f"Not enough stock of {label}, {requested} requested."
        else:
            message = f"Only {available} of {label} is available, {requested} requested."
        super().__init__(
            message,
            {"product_id": product_id, "available": available, "requested": requested},
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class StoreUnavailable(AppError):
    code = "STORE_UNAVAILABLE"
    status_code = 503


class StockCommitFailed(StoreUnavailable):
    code = "STOCK_COMMIT_FAILED"


class BillPersistFailed(StoreUnavailable):
    code = "BILL_PERSIST_FAILED"


class ArtifactError(AppError):
    code = "ARTIFACT_ERROR"
    status_code = 500


class NotifyError(AppError):
    code = "NOTIFY_ERROR"
    status_code = 502
