"""Integration tests for billing against the SQL stores"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from tests.conftest import requires_db

pytestmark = requires_db


@pytest.mark.asyncio
async def test_bill_end_to_end(
    async_client: AsyncClient, api_base: str, unique_product_id: int, create_product, billing_ready
):
    await create_product(unique_product_id, name="Flour", selling_price="50", stock=10)

    resp = await async_client.post(
        f"{api_base}/billing",
        json={"items": [{"productId": unique_product_id, "qty": 3}]},
    )
    assert resp.status_code == 201, resp.text
    result = resp.json()["data"]
    assert Decimal(result["total"]) == Decimal("150")
    assert result["warnings"] == []

    resp = await async_client.get(f"{api_base}/products/{unique_product_id}")
    assert resp.json()["data"]["stock"] == 7

    resp = await async_client.get(f"{api_base}/billing/{result['bill_id']}")
    assert resp.status_code == 200
    bill = resp.json()["data"]
    assert bill["items"][0]["name"] == "Flour"
    assert Decimal(bill["items"][0]["subtotal"]) == Decimal("150")

    download = await async_client.get(
        api_base.removesuffix("/api/v1") + result["download_url"]
    )
    assert download.status_code == 200
    assert download.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_bill_insufficient_stock_changes_nothing(
    async_client: AsyncClient, api_base: str, unique_product_id: int, create_product, billing_ready
):
    first, second = unique_product_id, unique_product_id + 1
    await create_product(first, name="Flour", stock=10)
    await create_product(second, name="Yeast", stock=2)

    resp = await async_client.post(
        f"{api_base}/billing",
        json={"items": [{"product_id": first, "qty": 1}, {"product_id": second, "qty": 5}]},
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["context"] == {"product_id": second, "available": 2, "requested": 5}

    for product_id, stock in ((first, 10), (second, 2)):
        resp = await async_client.get(f"{api_base}/products/{product_id}")
        assert resp.json()["data"]["stock"] == stock


@pytest.mark.asyncio
async def test_bill_unknown_product(async_client: AsyncClient, api_base: str, unique_product_id: int, billing_ready):
    resp = await async_client.post(
        f"{api_base}/billing",
        json={"items": [{"product_id": unique_product_id, "qty": 1}]},
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["context"]["product_id"] == unique_product_id


@pytest.mark.asyncio
async def test_regenerated_receipt_is_identical(
    async_client: AsyncClient, api_base: str, unique_product_id: int, create_product, billing_ready
):
    await create_product(unique_product_id, name="Butter", selling_price="12.50", stock=5)
    created = await async_client.post(
        f"{api_base}/billing",
        json={"items": [{"product_id": unique_product_id, "qty": 2}]},
    )
    result = created.json()["data"]
    receipt_url = api_base.removesuffix("/api/v1") + result["download_url"]
    original = (await async_client.get(receipt_url)).content

    resp = await async_client.post(f"{api_base}/billing/{result['bill_id']}/receipt")
    assert resp.status_code == 200
    assert resp.json()["data"]["download_url"] == result["download_url"]
    assert (await async_client.get(receipt_url)).content == original
