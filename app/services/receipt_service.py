"""Receipt rendering (reportlab).

Receipts are rendered with reportlab's invariant mode, so rendering the
same bill twice yields byte-identical PDFs.
"""

import asyncio
import logging
from io import BytesIO
from typing import List

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.config import settings
from app.core.exceptions import ArtifactError
from app.schemas.billing import BillResponse

logger = logging.getLogger(__name__)

W, H = A4
MARGIN = 50
LINE_HEIGHT = 18


def receipt_filename(bill_id) -> str:
    return f"bill_{bill_id}.pdf"


def receipt_lines(bill: BillResponse, currency: str) -> List[str]:
    """One text line per billed item, in bill order"""
    return [
        f"{index}. {item.name} - {item.qty} x {currency}{item.unit_price:.2f} = {currency}{item.subtotal:.2f}"
        for index, item in enumerate(bill.items, start=1)
    ]


def render_receipt_pdf(bill: BillResponse, shop_name: str, currency: str) -> bytes:
    """Draw the bill onto as many A4 pages as its items need."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4, invariant=1)
    c.setTitle(f"{shop_name} Bill {bill.id}")
    c.setAuthor(shop_name)

    y = H - MARGIN
    c.setFont("Helvetica-Bold", 20)
    c.drawCentredString(W / 2, y, f"{shop_name} Bill")
    y -= 30
    c.setFont("Helvetica", 10)
    c.drawString(MARGIN, y, f"Bill ID: {bill.id}")
    y -= 14
    c.drawString(MARGIN, y, f"Date: {bill.created_at:%Y-%m-%d %H:%M} UTC")
    y -= 2 * LINE_HEIGHT

    c.setFont("Helvetica", 12)
    for line in receipt_lines(bill, currency):
        if y < MARGIN + LINE_HEIGHT:
            c.showPage()
            c.setFont("Helvetica", 12)
            y = H - MARGIN
        c.drawString(MARGIN, y, line)
        y -= LINE_HEIGHT

    y -= LINE_HEIGHT
    if y < MARGIN:
        c.showPage()
        y = H - MARGIN
    c.setFont("Helvetica-Bold", 16)
    c.drawRightString(W - MARGIN, y, f"Total: {currency}{bill.total:.2f}")

    c.save()
    return buffer.getvalue()


class ReceiptRenderer:
    """Renders a stored bill into PDF bytes off the event loop"""

    def __init__(self, shop_name: str = None, currency: str = None):
        self.shop_name = shop_name or settings.SHOP_NAME
        self.currency = currency if currency is not None else settings.CURRENCY_LABEL

    async def render(self, bill: BillResponse) -> bytes:
        try:
            return await asyncio.to_thread(render_receipt_pdf, bill, self.shop_name, self.currency)
        except Exception as e:
            logger.exception("Receipt rendering failed for bill %s", bill.id)
            raise ArtifactError(f"Could not render receipt: {e}", {"bill_id": str(bill.id)}) from e
