"""
Invoice model representing a persistable invoice with resolved references.
"""

import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from .reference import Currency, InvoiceStatus
from .supplier import Supplier


class Invoice(BaseModel):
    """
    An invoice whose supplier, currency and status are already resolved.

    Attributes:
        id: Natural key from the source file (PK)
        date: Invoice date
        due_date: Payment due date
        cost: Invoice amount, 2 decimal places
        currency: Resolved currency reference
        status: Effective status (after the overdue override)
        supplier: Owning supplier
    """

    id: str = Field(..., min_length=1)
    date: datetime.date
    due_date: datetime.date
    cost: Decimal = Field(..., gt=0, decimal_places=2)
    currency: Currency
    status: InvoiceStatus
    supplier: Supplier

    @property
    def supplier_internal_id(self) -> str:
        return self.supplier.internal_id
