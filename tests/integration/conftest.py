"""Fixtures for tests that run against a real database."""

import pytest

from app.api.deps import build_billing_service
from app.database import init_db
from app.main import app


@pytest.fixture(scope="session")
async def db_schema():
    """Create tables once per test session."""
    await init_db()


@pytest.fixture
async def billing_ready(db_schema, clean_overrides):
    """Install the SQL-backed billing engine the way startup does."""
    app.state.billing_service = build_billing_service()
    yield app.state.billing_service


@pytest.fixture
async def create_product(async_client, api_base, db_schema):
    """Create a product through the API and return its payload."""

    async def _create(product_id: int, name: str = "Flour", selling_price: str = "50", stock: int = 10):
        payload = {
            "id": product_id,
            "name": name,
            "buying_price": "40",
            "selling_price": selling_price,
            "stock": stock,
        }
        resp = await async_client.post(f"{api_base}/products", json=payload)
        assert resp.status_code == 201, resp.text
        return payload

    return _create
