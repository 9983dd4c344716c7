"""SQL-backed stores used by the billing engine.

Each call runs in its own short transaction taken from a session factory,
so the engine can be built once at startup and shared across requests.
Driver and connectivity failures surface as StoreUnavailable errors.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import BillPersistFailed, StockCommitFailed, StoreUnavailable
from app.models.bill import Bill
from app.models.product import Product
from app.schemas.billing import BilledLineItem, BillResponse
from app.services.product_service import ProductService

logger = logging.getLogger(__name__)

_DB_ERRORS = (SQLAlchemyError, OSError)


class SqlInventoryStore:
    """Inventory store over the products table"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def fetch_by_ids(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        try:
            async with self._session_factory() as db:
                return await ProductService.get_products_by_ids(db, product_ids)
        except _DB_ERRORS as e:
            raise StoreUnavailable(f"Inventory lookup failed: {e}") from e

    async def decrement_stock(self, product_id: int, qty: int) -> bool:
        try:
            async with self._session_factory() as db:
                updated = await ProductService.decrement_stock(db, product_id, qty)
                await db.commit()
                return updated
        except _DB_ERRORS as e:
            raise StockCommitFailed(
                f"Stock update failed for product {product_id}: {e}",
                {"product_id": product_id, "qty": qty},
            ) from e

    async def restore_stock(self, product_id: int, qty: int) -> None:
        try:
            async with self._session_factory() as db:
                await ProductService.restore_stock(db, product_id, qty)
                await db.commit()
        except _DB_ERRORS as e:
            raise StoreUnavailable(
                f"Stock restore failed for product {product_id}: {e}",
                {"product_id": product_id, "qty": qty},
            ) from e


class SqlBillStore:
    """Bill store over the bills table; line items are kept as a JSON document"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create(self, items: List[BilledLineItem], total: Decimal) -> BillResponse:
        bill = Bill(
            items=[item.model_dump(mode="json") for item in items],
            total=total,
        )
        try:
            async with self._session_factory() as db:
                db.add(bill)
                await db.commit()
                await db.refresh(bill)
        except _DB_ERRORS as e:
            raise BillPersistFailed(f"Could not save bill: {e}") from e
        return BillResponse.model_validate(bill)

    async def get(self, bill_id: UUID) -> Optional[BillResponse]:
        try:
            async with self._session_factory() as db:
                result = await db.execute(select(Bill).where(Bill.id == bill_id))
                bill = result.scalar_one_or_none()
        except _DB_ERRORS as e:
            raise StoreUnavailable(f"Bill lookup failed: {e}") from e
        return BillResponse.model_validate(bill) if bill else None
