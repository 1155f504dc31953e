"""
Shared WHERE-clause builder for analytics queries.
"""

from typing import Any

from invoice_pipeline.core.models import InvoiceFilters


def apply_invoice_filters(
    filters: InvoiceFilters | None,
    alias: str = "i",
    include_dates: bool = True,
) -> tuple[list[str], dict[str, Any]]:
    """
    Translate InvoiceFilters into SQL conditions on the invoices table.

    Args:
        filters: Filters to apply (None means no filtering)
        alias: Alias of the invoices table in the query
        include_dates: Whether to apply the date range

    Returns:
        Tuple of (conditions to AND together, named query parameters)
    """
    conditions: list[str] = []
    params: dict[str, Any] = {}

    if filters is None:
        return conditions, params

    if filters.supplier_ids:
        conditions.append(f"{alias}.supplier_internal_id = ANY(%(supplier_ids)s)")
        params["supplier_ids"] = list(filters.supplier_ids)

    if include_dates and filters.has_date_range:
        conditions.append(f"{alias}.date BETWEEN %(start_date)s AND %(end_date)s")
        params["start_date"] = filters.start_date
        params["end_date"] = filters.end_date

    if filters.status_id is not None:
        conditions.append(f"{alias}.status_id = %(status_id)s")
        params["status_id"] = filters.status_id

    return conditions, params


def where_clause(conditions: list[str]) -> str:
    if not conditions:
        return ""
    return "WHERE " + " AND ".join(conditions)
