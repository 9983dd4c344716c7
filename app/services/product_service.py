"""Product Service - Inventory Business Logic"""

import logging
from typing import Dict, Iterable, List, Optional
from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ProductAlreadyExists
from app.models.product import Product
from app.schemas.product import ProductCreate, ProductUpdate
from app.utils.time import get_utc_now

logger = logging.getLogger(__name__)


class ProductService:
    """Service layer for product inventory operations"""

    @staticmethod
    async def list_products(db: AsyncSession) -> List[Product]:
        result = await db.execute(select(Product).order_by(Product.id))
        return list(result.scalars().all())

    @staticmethod
    async def get_product(db: AsyncSession, product_id: int) -> Optional[Product]:
        result = await db.execute(select(Product).where(Product.id == product_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_products_by_ids(db: AsyncSession, product_ids: Iterable[int]) -> Dict[int, Product]:
        """Return dict of id -> Product for the ids that exist. One query for the whole set."""
        ids = list(product_ids)
        if not ids:
            return {}
        result = await db.execute(select(Product).where(Product.id.in_(ids)))
        return {p.id: p for p in result.scalars().all()}

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
        """
        Insert a new product.

        Raises:
            ProductAlreadyExists: if the id is already taken
        """
        if await ProductService.get_product(db, data.id):
            raise ProductAlreadyExists(data.id)

        product = Product(
            id=data.id,
            name=data.name,
            buying_price=data.buying_price,
            selling_price=data.selling_price,
            stock=data.stock,
        )
        db.add(product)
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race against a concurrent insert of the same id
            await db.rollback()
            raise ProductAlreadyExists(data.id)
        await db.refresh(product)
        logger.info("Product %s created", product.id)
        return product

    @staticmethod
    async def update_product(
        db: AsyncSession, product_id: int, data: ProductUpdate
    ) -> Optional[Product]:
        """Apply the provided fields. Returns None if the product does not exist."""
        product = await ProductService.get_product(db, product_id)
        if not product:
            return None

        for field, value in data.model_dump(exclude_none=True).items():
            setattr(product, field, value)

        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> bool:
        result = await db.execute(delete(Product).where(Product.id == product_id))
        await db.commit()
        return result.rowcount > 0

    @staticmethod
    async def get_low_stock(db: AsyncSession, threshold: int) -> List[Product]:
        """Products with stock strictly below threshold, emptiest first."""
        result = await db.execute(
            select(Product)
            .where(Product.stock < threshold)
            .order_by(Product.stock, Product.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def decrement_stock(db: AsyncSession, product_id: int, qty: int) -> bool:
        """
        Atomically take qty units out of stock.

        A single conditional UPDATE; it only matches while enough stock
        remains, so concurrent callers can never drive stock negative.
        The caller owns the commit.

        Returns:
            True if the row was updated, False if stock was insufficient
            (or the product vanished)
        """
        result = await db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= qty)
            .values(stock=Product.stock - qty, updated_at=get_utc_now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    async def restore_stock(db: AsyncSession, product_id: int, qty: int) -> bool:
        """Put qty units back (compensation). The caller owns the commit."""
        result = await db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock=Product.stock + qty, updated_at=get_utc_now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
