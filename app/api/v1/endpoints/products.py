"""Inventory Endpoints"""

from typing import Annotated, Any, List

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api import deps
from app.config import settings
from app.core.exceptions import ProductNotFound
from app.schemas.product import MAX_INT, LowStockReport, ProductCreate, ProductResponse, ProductUpdate
from app.schemas.responses import SuccessResponse
from app.services.low_stock_service import LowStockService
from app.services.product_service import ProductService

router = APIRouter()

ProductId = Annotated[int, Path(gt=0, le=MAX_INT)]


@router.get("", response_model=SuccessResponse[List[ProductResponse]])
async def list_products(db: AsyncSession = Depends(deps.get_db)) -> Any:
    products = await ProductService.list_products(db)
    return SuccessResponse(data=[ProductResponse.model_validate(p) for p in products])


@router.post("", response_model=SuccessResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(
    product_in: ProductCreate,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Add a product. Every field is required; prices and stock must be numeric.
    """
    product = await ProductService.create_product(db, product_in)
    return SuccessResponse(
        data=ProductResponse.model_validate(product),
        message="Product added successfully"
    )


@router.get("/low-stock", response_model=SuccessResponse[List[ProductResponse]])
async def list_low_stock(
    threshold: int = Query(None, ge=1, le=MAX_INT, description="Defaults to LOW_STOCK_THRESHOLD"),
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """List products below the stock threshold without sending anything."""
    products = await ProductService.get_low_stock(db, threshold or settings.LOW_STOCK_THRESHOLD)
    return SuccessResponse(data=[ProductResponse.model_validate(p) for p in products])


@router.get("/low-stock/email", response_model=SuccessResponse[LowStockReport])
async def email_low_stock(
    db: AsyncSession = Depends(deps.get_db),
    notifier=Depends(deps.get_notifier),
) -> Any:
    """
    Email the low-stock list to ALERT_EMAIL now.
    Nothing is sent when no product is below the threshold.
    """
    report = await LowStockService.run_sweep(db, notifier)
    return SuccessResponse(data=report, message=report.message)


@router.get("/{product_id}", response_model=SuccessResponse[ProductResponse])
async def get_product(product_id: ProductId, db: AsyncSession = Depends(deps.get_db)) -> Any:
    product = await ProductService.get_product(db, product_id)
    if not product:
        raise ProductNotFound(product_id)
    return SuccessResponse(data=ProductResponse.model_validate(product))


@router.put("/{product_id}", response_model=SuccessResponse[ProductResponse])
async def update_product(
    product_id: ProductId,
    product_in: ProductUpdate,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    product = await ProductService.update_product(db, product_id, product_in)
    if not product:
        raise ProductNotFound(product_id)
    return SuccessResponse(
        data=ProductResponse.model_validate(product),
        message="Product updated successfully"
    )


@router.delete("/{product_id}", response_model=SuccessResponse)
async def delete_product(product_id: ProductId, db: AsyncSession = Depends(deps.get_db)) -> Any:
    if not await ProductService.delete_product(db, product_id):
        raise ProductNotFound(product_id)
    return SuccessResponse(message="Product deleted successfully")
