"""Billing Service - one purchase, end to end.

Workflow for ``place_order``:

1. resolve every requested product in one read
2. validate quantities against stock and price each line (request order kept)
3. take stock with one conditional update per product
4. persist the bill
5. render and store the receipt
6. optionally email the receipt

Steps 1-4 are fatal: any failure is raised to the caller. If step 3 or 4
fails after some stock was already taken, the taken units are put back
before the error is raised. Steps 5-6 run after the purchase is final;
their failures are logged and reported as warnings on the result.
"""

import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from app.core.exceptions import (
    ArtifactError,
    BillNotFound,
    BillPersistFailed,
    InsufficientStock,
    NotifyError,
    ProductNotFound,
    StockCommitFailed,
    StoreUnavailable,
    ValidationError,
)
from app.schemas.billing import BilledLineItem, BillRequestItem, BillResponse, BillResult
from app.services.receipt_service import receipt_filename

logger = logging.getLogger(__name__)


class BillingService:
    """
    Billing engine. Built once at startup with its collaborators:

    - inventory: fetch_by_ids / decrement_stock / restore_stock
    - bills: create / get
    - renderer: render(bill) -> bytes
    - receipts: save(bill_id, content) -> download url
    - notifier: send_receipt(...) -> bool
    """

    def __init__(self, inventory, bills, renderer, receipts, notifier):
        self.inventory = inventory
        self.bills = bills
        self.renderer = renderer
        self.receipts = receipts
        self.notifier = notifier

    async def place_order(
        self,
        items: Sequence[BillRequestItem],
        notify_email: Optional[str] = None,
    ) -> BillResult:
        if not items:
            raise ValidationError("At least one item is required")

        requested_ids = list(OrderedDict.fromkeys(item.product_id for item in items))
        products = await self.inventory.fetch_by_ids(requested_ids)
        for product_id in requested_ids:
            if product_id not in products:
                raise ProductNotFound(product_id)

        line_items, total = self._price(items, products)

        taken = await self._take_stock(line_items)

        try:
            bill = await self.bills.create(line_items, total)
        except BillPersistFailed:
            logger.error("Bill persistence failed; restoring stock for %d product(s)", len(taken))
            await self._restore_stock(taken)
            raise

        logger.info("Bill %s saved: %d item(s), total %s", bill.id, len(bill.items), bill.total)

        result = BillResult(
            bill_id=bill.id,
            items=bill.items,
            total=bill.total,
            created_at=bill.created_at,
        )

        content = await self._publish_receipt(bill, result)
        if notify_email:
            await self._notify(notify_email, bill, content, result)

        return result

    async def get_bill(self, bill_id: UUID) -> BillResponse:
        bill = await self.bills.get(bill_id)
        if bill is None:
            raise BillNotFound(bill_id)
        return bill

    async def regenerate_receipt(self, bill_id: UUID) -> str:
        """Re-render a stored bill's receipt and store it again. Returns its download url."""
        bill = await self.get_bill(bill_id)
        content = await self.renderer.render(bill)
        return await self.receipts.save(bill.id, content)

    @staticmethod
    def _price(
        items: Sequence[BillRequestItem], products: Dict[int, object]
    ) -> Tuple[List[BilledLineItem], Decimal]:
        """Validate quantities and snapshot prices. Repeated ids count against stock together."""
        demand: Dict[int, int] = {}
        line_items = []
        total = Decimal("0")

        for item in items:
            product = products[item.product_id]
            demand[item.product_id] = demand.get(item.product_id, 0) + item.qty
            if demand[item.product_id] > product.stock:
                raise InsufficientStock(
                    item.product_id, product.stock, demand[item.product_id], name=product.name
                )

            unit_price = Decimal(product.selling_price)
            subtotal = unit_price * item.qty
            total += subtotal
            line_items.append(
                BilledLineItem(
                    product_id=product.id,
                    name=product.name,
                    unit_price=unit_price,
                    qty=item.qty,
                    subtotal=subtotal,
                )
            )

        return line_items, total

    async def _take_stock(self, line_items: List[BilledLineItem]) -> List[Tuple[int, int]]:
        """
        Decrement stock product by product. On any failure, put back what
        this order already took and raise.
        """
        wanted: Dict[int, int] = OrderedDict()
        names: Dict[int, str] = {}
        for line in line_items:
            wanted[line.product_id] = wanted.get(line.product_id, 0) + line.qty
            names[line.product_id] = line.name

        taken: List[Tuple[int, int]] = []
        for product_id, qty in wanted.items():
            try:
                ok = await self.inventory.decrement_stock(product_id, qty)
            except StockCommitFailed:
                await self._restore_stock(taken)
                raise
            except StoreUnavailable as e:
                await self._restore_stock(taken)
                raise StockCommitFailed(e.message, {"product_id": product_id, "qty": qty}) from e

            if not ok:
                # Another order took the units between our read and this update
                await self._restore_stock(taken)
                available = await self._current_stock(product_id)
                raise InsufficientStock(product_id, available, qty, name=names[product_id])

            taken.append((product_id, qty))

        return taken

    async def _restore_stock(self, taken: List[Tuple[int, int]]) -> None:
        for product_id, qty in reversed(taken):
            try:
                await self.inventory.restore_stock(product_id, qty)
                logger.info("Restored %d unit(s) of product %s", qty, product_id)
            except StoreUnavailable:
                logger.exception(
                    "Stock restore failed; product %s is short by %d unit(s)",
                    product_id,
                    qty,
                    extra={"product_id": product_id, "qty": qty},
                )

    async def _current_stock(self, product_id: int) -> Optional[int]:
        try:
            products = await self.inventory.fetch_by_ids([product_id])
        except StoreUnavailable:
            return None
        product = products.get(product_id)
        return product.stock if product else 0

    async def _publish_receipt(self, bill: BillResponse, result: BillResult) -> Optional[bytes]:
        try:
            content = await self.renderer.render(bill)
            result.download_url = await self.receipts.save(bill.id, content)
        except ArtifactError as e:
            logger.warning("Receipt unavailable for bill %s: %s", bill.id, e)
            result.warnings.append(f"Receipt could not be generated: {e.message}")
            return None
        return content

    async def _notify(
        self, to_email: str, bill: BillResponse, content: Optional[bytes], result: BillResult
    ) -> None:
        if content is None:
            result.warnings.append("Receipt email not sent: no receipt was generated")
            return
        try:
            sent = await self.notifier.send_receipt(
                to_email, bill.id, receipt_filename(bill.id), content, result.download_url
            )
        except NotifyError as e:
            logger.warning("Receipt email for bill %s failed: %s", bill.id, e)
            sent = False
        if sent:
            result.emailed = True
        else:
            result.warnings.append(f"Receipt email could not be sent to {to_email}")
