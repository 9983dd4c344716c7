"""Unit tests for the low-stock reporter."""

from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotifyError
from app.models.product import Product
from app.services.low_stock_service import NOTHING_TO_REPORT, LowStockService, seconds_until
from tests.fakes import RecordingNotifier


def _product(pid: int, name: str, stock: int) -> Product:
    return Product(
        id=pid,
        name=name,
        buying_price=Decimal("10"),
        selling_price=Decimal("12"),
        stock=stock,
    )


def test_format_alert():
    body = LowStockService.format_alert([_product(1, "Flour", 0), _product(2, "Yeast", 2)], 3)
    assert body == (
        "The following products have stock less than 3:\n\n"
        "Flour (Stock: 0)\n"
        "Yeast (Stock: 2)"
    )


@pytest.mark.asyncio
async def test_sweep_with_nothing_low_sends_nothing():
    db = AsyncMock(spec=AsyncSession)
    notifier = RecordingNotifier()

    with patch(
        "app.services.low_stock_service.ProductService.get_low_stock", new_callable=AsyncMock
    ) as mock_low:
        mock_low.return_value = []
        report = await LowStockService.run_sweep(db, notifier, threshold=3, recipient="owner@example.com")

    mock_low.assert_awaited_once_with(db, 3)
    assert report.notified is False
    assert report.products == []
    assert report.message == NOTHING_TO_REPORT
    assert notifier.alerts == []


@pytest.mark.asyncio
async def test_sweep_emails_low_products():
    db = AsyncMock(spec=AsyncSession)
    notifier = RecordingNotifier()

    with patch(
        "app.services.low_stock_service.ProductService.get_low_stock", new_callable=AsyncMock
    ) as mock_low:
        mock_low.return_value = [_product(7, "Butter", 1)]
        report = await LowStockService.run_sweep(db, notifier, threshold=3, recipient="owner@example.com")

    assert report.notified is True
    assert [p.id for p in report.products] == [7]
    to_email, body = notifier.alerts[0]
    assert to_email == "owner@example.com"
    assert "Butter (Stock: 1)" in body


@pytest.mark.asyncio
async def test_sweep_uses_configured_threshold(monkeypatch):
    monkeypatch.setattr("app.services.low_stock_service.settings.LOW_STOCK_THRESHOLD", 5)
    db = AsyncMock(spec=AsyncSession)

    with patch(
        "app.services.low_stock_service.ProductService.get_low_stock", new_callable=AsyncMock
    ) as mock_low:
        mock_low.return_value = []
        report = await LowStockService.run_sweep(db, RecordingNotifier())

    mock_low.assert_awaited_once_with(db, 5)
    assert report.threshold == 5


@pytest.mark.asyncio
async def test_sweep_send_failure_raises():
    db = AsyncMock(spec=AsyncSession)

    with patch(
        "app.services.low_stock_service.ProductService.get_low_stock", new_callable=AsyncMock
    ) as mock_low:
        mock_low.return_value = [_product(7, "Butter", 1)]
        with pytest.raises(NotifyError):
            await LowStockService.run_sweep(
                db, RecordingNotifier(result=False), threshold=3, recipient="owner@example.com"
            )


@pytest.mark.asyncio
async def test_sweep_without_recipient_raises(monkeypatch):
    monkeypatch.setattr("app.services.low_stock_service.settings.ALERT_EMAIL", None)
    db = AsyncMock(spec=AsyncSession)
    notifier = RecordingNotifier()

    with patch(
        "app.services.low_stock_service.ProductService.get_low_stock", new_callable=AsyncMock
    ) as mock_low:
        mock_low.return_value = [_product(7, "Butter", 1)]
        with pytest.raises(NotifyError):
            await LowStockService.run_sweep(db, notifier, threshold=3)

    assert notifier.alerts == []


def test_seconds_until_later_today():
    now = datetime(2026, 10, 18, 12, 0, 0)
    assert seconds_until(13, 0, now) == 3600


def test_seconds_until_rolls_to_tomorrow():
    now = datetime(2026, 10, 18, 13, 0, 0)
    assert seconds_until(13, 0, now) == 24 * 3600
    now = datetime(2026, 10, 18, 14, 30, 0)
    assert seconds_until(13, 0, now) == 22.5 * 3600
