"""
Invoice construction from validated rows.
"""

import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

from invoice_pipeline.core.constants import INVOICE_STATUS_OVERDUE
from invoice_pipeline.core.errors import ValidationFailed
from invoice_pipeline.core.models import ROW_KIND_INVOICE, Invoice, InvoiceRow, Supplier

from .reference_cache import ReferenceCache

CENT = Decimal("0.01")

Clock = Callable[[], datetime.datetime]


class InvoiceBuilder:
    """
    Turns an InvoiceRow plus its supplier into an Invoice.

    An invoice whose due date (taken as midnight, local time) is before the
    current time is marked OVERDUE whatever status the row declares,
    PAID included.
    """

    def __init__(self, cache: ReferenceCache, clock: Clock = datetime.datetime.now):
        """
        Initialize invoice builder.

        Args:
            cache: Currency and status lookup
            clock: Returns the current naive local time
        """
        self.cache = cache
        self.clock = clock

    def is_overdue(self, due_date: datetime.date, now: datetime.datetime | None = None) -> bool:
        now = now or self.clock()
        return datetime.datetime.combine(due_date, datetime.time.min) < now

    def effective_status(self, row: InvoiceRow, now: datetime.datetime | None = None) -> str:
        if self.is_overdue(row.invoice_due_date, now):
            return INVOICE_STATUS_OVERDUE
        return row.invoice_status

    def build(self, row: InvoiceRow, supplier: Supplier) -> Invoice:
        """
        Build an invoice; nothing is persisted.

        Args:
            row: Validated invoice row
            supplier: Resolved supplier for the row

        Returns:
            Invoice with resolved currency and effective status

        Raises:
            CurrencyNotFound: If the currency is not in the cache
            StatusNotFound: If the effective status is not in the cache
            ValidationFailed: If the cost rounds to zero
        """
        currency = self.cache.currency(row.invoice_currency)
        status = self.cache.status(self.effective_status(row))

        cost = row.invoice_cost.quantize(CENT, rounding=ROUND_HALF_UP)
        if cost <= 0:
            raise ValidationFailed(
                ROW_KIND_INVOICE, row.invoice_id, {"invoice_cost": "Rounds to zero at 2 decimal places"}
            )

        return Invoice(
            id=row.invoice_id,
            date=row.invoice_date,
            due_date=row.invoice_due_date,
            cost=cost,
            currency=currency,
            status=status,
            supplier=supplier,
        )
