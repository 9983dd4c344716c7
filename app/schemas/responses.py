"""Standardized API Response Schemas"""

from typing import Any, Dict, Generic, Optional, TypeVar
from pydantic import BaseModel, Field


T = TypeVar('T')


class SuccessResponse(BaseModel, Generic[T]):
    """
    Standard success response envelope.

    Example:
        {
            "success": true,
            "data": {...},
            "message": "Operation successful"
        }
    """
    success: bool = True
    data: Optional[T] = None
    message: str = "Operation successful"


class ErrorDetail(BaseModel):
    """Error details structure"""
    code: str
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """
    Standard error response envelope.

    Example:
        {
            "success": false,
            "error": {
                "code": "INSUFFICIENT_STOCK",
                "message": "Only 2 of \\"Flour\\" is available, 5 requested.",
                "context": {"product_id": 1, "available": 2, "requested": 5}
            }
        }
    """
    success: bool = False
    error: ErrorDetail
