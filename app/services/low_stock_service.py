"""Low-Stock Reporter - on-demand sweep and the daily scheduled sweep"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import NotifyError
from app.database import AsyncSessionLocal
from app.models.product import Product
from app.schemas.product import LowStockReport, ProductResponse
from app.services.product_service import ProductService
from app.utils.time import get_utc_now

logger = logging.getLogger(__name__)

NOTHING_TO_REPORT = "No low-stock products to report."


class LowStockService:
    """Finds products below the stock threshold and mails the list"""

    @staticmethod
    def format_alert(products: Iterable[Product], threshold: int) -> str:
        listing = "\n".join(f"{p.name} (Stock: {p.stock})" for p in products)
        return f"The following products have stock less than {threshold}:\n\n{listing}"

    @staticmethod
    async def run_sweep(
        db: AsyncSession,
        notifier,
        threshold: Optional[int] = None,
        recipient: Optional[str] = None,
    ) -> LowStockReport:
        """
        Query low-stock products and email them to the alert recipient.

        An empty result sends nothing and is not an error.

        Raises:
            NotifyError: no recipient configured, or the email could not be sent
        """
        threshold = threshold if threshold is not None else settings.LOW_STOCK_THRESHOLD
        recipient = recipient or settings.ALERT_EMAIL

        products = await ProductService.get_low_stock(db, threshold)
        listed = [ProductResponse.model_validate(p) for p in products]
        if not products:
            logger.info("Low-stock sweep: nothing to report (threshold %d)", threshold)
            return LowStockReport(threshold=threshold, message=NOTHING_TO_REPORT)

        if not recipient:
            raise NotifyError("ALERT_EMAIL is not configured", {"products": len(products)})

        body = LowStockService.format_alert(products, threshold)
        if not await notifier.send_low_stock_alert(recipient, body):
            raise NotifyError(
                "Failed to send low-stock email",
                {"recipient": recipient, "products": len(products)},
            )

        logger.info("Low-stock alert sent for %d product(s)", len(products))
        return LowStockReport(
            threshold=threshold,
            products=listed,
            notified=True,
            message="Low stock email sent successfully.",
        )


def seconds_until(hour: int, minute: int, now: Optional[datetime] = None) -> float:
    """Seconds from now (naive UTC) to the next hour:minute; a time already passed today rolls to tomorrow."""
    now = now or get_utc_now()
    target = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


async def run_low_stock_schedule(notifier, session_factory=AsyncSessionLocal) -> None:
    """
    Daily sweep loop. Runs until cancelled; a failed sweep is logged and
    the loop waits for the next day.
    """
    while True:
        delay = seconds_until(settings.LOW_STOCK_ALERT_HOUR, settings.LOW_STOCK_ALERT_MINUTE)
        logger.info("Next low-stock sweep in %.0f seconds", delay)
        await asyncio.sleep(delay)

        logger.info("Running scheduled low-stock sweep")
        try:
            async with session_factory() as db:
                report = await LowStockService.run_sweep(db, notifier)
            logger.info("Scheduled low-stock sweep: %s", report.message)
        except Exception:
            logger.exception("Scheduled low-stock sweep failed")
