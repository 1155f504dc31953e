"""
Filter and result models for the analytics engine.
"""

from datetime import date

from pydantic import BaseModel, Field, model_validator


class InvoiceFilters(BaseModel):
    """
    Filter predicate shared by all analytics queries.

    Attributes:
        supplier_ids: Restrict to invoices of these suppliers
        start_date: Inclusive lower bound on invoice date
        end_date: Inclusive upper bound on invoice date
        status_id: Restrict to invoices with this status id
    """

    supplier_ids: list[str] | None = None
    start_date: date | None = None
    end_date: date | None = None
    status_id: int | None = None

    @model_validator(mode="after")
    def check_date_range(self) -> "InvoiceFilters":
        """Validate that start_date and end_date are given together."""
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be provided together")
        return self

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None and self.end_date is not None


class ChartData(BaseModel):
    """A single (label, value) point of a chart series."""

    name: str
    value: float


class Metric(BaseModel):
    """
    One weekly metric.

    Attributes:
        difference: Percent change against the previous week
        amount: Value for the current week
    """

    difference: int
    amount: int


class WeeklyMetrics(BaseModel):
    """Week-over-week earnings, invoice count and overdue count."""

    earnings: Metric
    invoices: Metric
    overdue: Metric


class WindowTotals(BaseModel):
    """Raw metrics for one rolling window."""

    total_amount: float = Field(0.0, ge=0)
    invoice_count: int = Field(0, ge=0)
    overdue_count: int = Field(0, ge=0)
