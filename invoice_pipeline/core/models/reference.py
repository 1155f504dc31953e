"""
Reference data models: currencies and invoice statuses.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class Currency(BaseModel):
    """
    A currency row, seeded from the fixed enumeration.

    Attributes:
        id: Serial primary key
        name: Natural key (USD, EUR, GBP)
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: Literal["USD", "EUR", "GBP"]


class InvoiceStatus(BaseModel):
    """
    An invoice status row, seeded from the fixed enumeration.

    Attributes:
        id: Serial primary key
        name: Natural key (PAID, PENDING, OVERDUE)
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: Literal["PAID", "PENDING", "OVERDUE"]
