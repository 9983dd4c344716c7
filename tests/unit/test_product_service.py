"""Unit tests for ProductService."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ProductAlreadyExists
from app.models.product import Product
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.product_service import ProductService


def _create_payload(**overrides) -> ProductCreate:
    data = {
        "id": 1,
        "name": "Flour",
        "buying_price": "40.00",
        "selling_price": "50.00",
        "stock": 10,
    }
    data.update(overrides)
    return ProductCreate(**data)


@pytest.mark.asyncio
async def test_create_product_success():
    db = AsyncMock(spec=AsyncSession)
    db.add = MagicMock()

    with patch("app.services.product_service.ProductService.get_product", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = None
        product = await ProductService.create_product(db, _create_payload())

    assert product.id == 1
    assert product.selling_price == Decimal("50.00")
    db.add.assert_called_once_with(product)
    assert db.commit.called


@pytest.mark.asyncio
async def test_create_product_duplicate_id():
    db = AsyncMock(spec=AsyncSession)
    db.add = MagicMock()

    with patch("app.services.product_service.ProductService.get_product", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = Product(id=1, name="Flour", stock=3)
        with pytest.raises(ProductAlreadyExists):
            await ProductService.create_product(db, _create_payload())

    assert not db.add.called
    assert not db.commit.called


@pytest.mark.asyncio
async def test_create_product_insert_race():
    db = AsyncMock(spec=AsyncSession)
    db.add = MagicMock()
    db.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

    with patch("app.services.product_service.ProductService.get_product", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = None
        with pytest.raises(ProductAlreadyExists):
            await ProductService.create_product(db, _create_payload())

    assert db.rollback.called


@pytest.mark.asyncio
async def test_update_product_applies_only_given_fields():
    db = AsyncMock(spec=AsyncSession)
    existing = Product(
        id=1, name="Flour", buying_price=Decimal("40"), selling_price=Decimal("50"), stock=10
    )

    with patch("app.services.product_service.ProductService.get_product", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = existing
        updated = await ProductService.update_product(
            db, 1, ProductUpdate(selling_price="55.00", stock=4)
        )

    assert updated is existing
    assert existing.name == "Flour"
    assert existing.buying_price == Decimal("40")
    assert existing.selling_price == Decimal("55.00")
    assert existing.stock == 4
    assert db.commit.called


@pytest.mark.asyncio
async def test_update_product_missing():
    db = AsyncMock(spec=AsyncSession)

    with patch("app.services.product_service.ProductService.get_product", new_callable=AsyncMock) as mock_get:
        mock_get.return_value = None
        assert await ProductService.update_product(db, 42, ProductUpdate(stock=1)) is None

    assert not db.commit.called


@pytest.mark.asyncio
@pytest.mark.parametrize("rowcount,expected", [(1, True), (0, False)])
async def test_delete_product_reports_rowcount(rowcount, expected):
    db = AsyncMock(spec=AsyncSession)
    db.execute.return_value = MagicMock(rowcount=rowcount)

    assert await ProductService.delete_product(db, 1) is expected


@pytest.mark.asyncio
@pytest.mark.parametrize("rowcount,expected", [(1, True), (0, False)])
async def test_decrement_stock_checks_affected_rows(rowcount, expected):
    db = AsyncMock(spec=AsyncSession)
    db.execute.return_value = MagicMock(rowcount=rowcount)

    assert await ProductService.decrement_stock(db, 1, 3) is expected
    assert db.execute.await_count == 1
    assert not db.commit.called


@pytest.mark.asyncio
async def test_decrement_stock_is_a_conditional_update():
    db = AsyncMock(spec=AsyncSession)
    db.execute.return_value = MagicMock(rowcount=1)

    await ProductService.decrement_stock(db, 1, 3)

    compiled = db.execute.await_args.args[0].compile()
    sql = str(compiled)
    assert sql.startswith("UPDATE products SET stock=")
    assert "products.stock -" in sql
    assert "WHERE products.id = " in sql
    assert "AND products.stock >= " in sql
    assert list(compiled.params.values()).count(3) == 2


@pytest.mark.asyncio
async def test_get_products_by_ids_skips_query_for_empty_set():
    db = AsyncMock(spec=AsyncSession)
    assert await ProductService.get_products_by_ids(db, []) == {}
    assert not db.execute.called
