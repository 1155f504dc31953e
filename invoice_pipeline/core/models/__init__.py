"""
Core data models for the invoice ingestion pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .analytics import ChartData, InvoiceFilters, Metric, WeeklyMetrics, WindowTotals
from .ingestion_result import IngestionResult
from .invoice import Invoice
from .reference import Currency, InvoiceStatus
from .rows import (
    ROW_KIND_INVOICE,
    ROW_KIND_SUPPLIER,
    InvoiceRow,
    RawRow,
    SupplierRow,
)
from .supplier import Supplier
from .validation_result import ValidationResult

__all__ = [
    "ChartData",
    "Currency",
    "IngestionResult",
    "Invoice",
    "InvoiceFilters",
    "InvoiceRow",
    "InvoiceStatus",
    "Metric",
    "RawRow",
    "ROW_KIND_INVOICE",
    "ROW_KIND_SUPPLIER",
    "Supplier",
    "SupplierRow",
    "ValidationResult",
    "WeeklyMetrics",
    "WindowTotals",
]
