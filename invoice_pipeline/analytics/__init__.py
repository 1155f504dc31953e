"""
Aggregation queries over persisted invoices.
"""

from .engine import AnalyticsEngine, percent_change, round_half_up
from .filters import apply_invoice_filters

__all__ = [
    "AnalyticsEngine",
    "apply_invoice_filters",
    "percent_change",
    "round_half_up",
]
