"""
Analytics queries over persisted invoices.

All queries share the InvoiceFilters predicate. Any failure is logged and
raised as AnalyticsQueryFailed naming the query; no partial results.
"""

import datetime
import math
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Callable

from invoice_pipeline.core.constants import INVOICE_STATUS_OVERDUE
from invoice_pipeline.core.errors import AnalyticsQueryFailed
from invoice_pipeline.core.models import (
    ChartData,
    InvoiceFilters,
    Metric,
    WeeklyMetrics,
    WindowTotals,
)
from invoice_pipeline.observability import metrics
from invoice_pipeline.observability.logger import get_logger
from invoice_pipeline.warehouse.connection import DatabaseConnectionPool

from .filters import apply_invoice_filters, where_clause

logger = get_logger(__name__)

TREND_DATE_FORMAT = "%d/%m/%Y"
WEEK = datetime.timedelta(weeks=1)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)


def percent_change(current: float, previous: float) -> int:
    """
    Whole-number percent change from previous to current.

    A zero previous value gives 0 when current is also zero, else 100.
    """
    if previous == 0:
        return 0 if current == 0 else 100
    return round_half_up((current - previous) / previous * 100)


class AnalyticsEngine:
    """
    Aggregation queries for dashboards.

    Provides:
    - Amounts by status
    - Overdue invoices trend
    - Monthly totals
    - Weekly metrics (rolling week against the week before)
    - Amounts by supplier
    """

    def __init__(
        self,
        pool: DatabaseConnectionPool,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ):
        """
        Initialize analytics engine.

        Args:
            pool: Database connection pool
            clock: Returns the current naive local time
        """
        self.pool = pool
        self.clock = clock

    @contextmanager
    def _query(self, query_name: str, filters: InvoiceFilters | None) -> Iterator[None]:
        description = query_name.replace("_", " ")
        logger.info(
            f"Fetching {description}",
            extra={"query": query_name, "filters": filters.model_dump(mode="json") if filters else None},
        )
        try:
            with metrics.track_duration(metrics.analytics_query_duration_seconds, query=query_name):
                yield
        except Exception as e:
            logger.error(f"Error fetching {description}: {e}", extra={"query": query_name}, exc_info=True)
            metrics.record_analytics_query(query_name, success=False)
            raise AnalyticsQueryFailed(query_name) from e

        metrics.record_analytics_query(query_name, success=True)
        logger.info(f"Fetched {description}", extra={"query": query_name})

    def _fetch(self, sql: str, params: dict[str, Any]) -> list[dict]:
        return self.pool.execute_query(sql, params)

    def get_amounts_by_status(self, filters: InvoiceFilters | None = None) -> list[ChartData]:
        """
        Total invoice cost per status name.

        Args:
            filters: Supplier, date range and status filters

        Returns:
            One ChartData per status with invoices
        """
        with self._query("amounts_by_status", filters):
            conditions, params = apply_invoice_filters(filters)
            rows = self._fetch(
                f"""
                SELECT s.name AS name, SUM(i.cost) AS value
                FROM invoices i
                JOIN invoice_status s ON s.id = i.status_id
                {where_clause(conditions)}
                GROUP BY s.name
                ORDER BY s.name
                """,
                params,
            )
            return [ChartData(name=row["name"], value=float(row["value"])) for row in rows]

    def get_overdue_trend(self, filters: InvoiceFilters | None = None) -> list[ChartData]:
        """
        Number of overdue invoices per due date, oldest first.

        Args:
            filters: Supplier, date range and status filters

        Returns:
            ChartData named by due date as DD/MM/YYYY
        """
        with self._query("overdue_invoices_trend", filters):
            conditions, params = apply_invoice_filters(filters)
            conditions.insert(0, "s.name = %(overdue)s")
            params["overdue"] = INVOICE_STATUS_OVERDUE
            rows = self._fetch(
                f"""
                SELECT i.due_date AS due_date, COUNT(i.id) AS value
                FROM invoices i
                JOIN invoice_status s ON s.id = i.status_id
                {where_clause(conditions)}
                GROUP BY i.due_date
                ORDER BY i.due_date
                """,
                params,
            )
            return [
                ChartData(name=row["due_date"].strftime(TREND_DATE_FORMAT), value=float(row["value"]))
                for row in rows
            ]

    def get_monthly_totals(self, filters: InvoiceFilters | None = None) -> list[ChartData]:
        """
        Total invoice cost per calendar month of the invoice date.

        Args:
            filters: Supplier, date range and status filters

        Returns:
            ChartData labelled "Month YYYY", in chronological order
        """
        with self._query("monthly_totals", filters):
            conditions, params = apply_invoice_filters(filters)
            rows = self._fetch(
                f"""
                SELECT
                    TO_CHAR(date_trunc('month', i.date), 'FMMonth YYYY') AS name,
                    SUM(i.cost) AS value
                FROM invoices i
                {where_clause(conditions)}
                GROUP BY date_trunc('month', i.date)
                ORDER BY date_trunc('month', i.date)
                """,
                params,
            )
            return [ChartData(name=row["name"].strip(), value=float(row["value"])) for row in rows]

    def get_amounts_by_supplier(self, filters: InvoiceFilters | None = None) -> list[ChartData]:
        """
        Total invoice cost per supplier company name.

        Args:
            filters: Supplier, date range and status filters

        Returns:
            One ChartData per company with invoices
        """
        with self._query("supplier_analysis", filters):
            conditions, params = apply_invoice_filters(filters)
            rows = self._fetch(
                f"""
                SELECT sp.company_name AS name, SUM(i.cost) AS value
                FROM suppliers sp
                JOIN invoices i ON i.supplier_internal_id = sp.internal_id
                {where_clause(conditions)}
                GROUP BY sp.company_name
                ORDER BY sp.company_name
                """,
                params,
            )
            return [ChartData(name=row["name"], value=float(row["value"])) for row in rows]

    def get_window_totals(
        self,
        start: datetime.datetime,
        end: datetime.datetime,
        filters: InvoiceFilters | None = None,
    ) -> WindowTotals:
        """
        Cost total, invoice count and overdue count for invoices dated
        between start and end, both inclusive.
        """
        conditions, params = apply_invoice_filters(filters, include_dates=False)
        conditions.append("i.date BETWEEN %(window_start)s AND %(window_end)s")
        params.update(window_start=start, window_end=end, overdue=INVOICE_STATUS_OVERDUE)

        rows = self._fetch(
            f"""
            SELECT
                COALESCE(SUM(i.cost), 0) AS total_amount,
                COUNT(i.id) AS invoice_count,
                COUNT(i.id) FILTER (WHERE s.name = %(overdue)s) AS overdue_count
            FROM invoices i
            JOIN invoice_status s ON s.id = i.status_id
            {where_clause(conditions)}
            """,
            params,
        )
        row = rows[0] if rows else {}
        return WindowTotals(
            total_amount=float(row.get("total_amount") or 0),
            invoice_count=int(row.get("invoice_count") or 0),
            overdue_count=int(row.get("overdue_count") or 0),
        )

    def get_weekly_metrics(self, filters: InvoiceFilters | None = None) -> WeeklyMetrics:
        """
        Compare the last 7 days with the 7 days before.

        The rolling windows replace any date range in filters; supplier
        and status filters still apply.

        Args:
            filters: Supplier and status filters

        Returns:
            WeeklyMetrics with percent differences and current amounts
        """
        with self._query("weekly_metrics", filters):
            now = self.clock()
            this_week = self.get_window_totals(now - WEEK, now, filters)
            last_week = self.get_window_totals(now - 2 * WEEK, now - WEEK, filters)

            return WeeklyMetrics(
                earnings=Metric(
                    difference=percent_change(this_week.total_amount, last_week.total_amount),
                    amount=round_half_up(this_week.total_amount),
                ),
                invoices=Metric(
                    difference=percent_change(this_week.invoice_count, last_week.invoice_count),
                    amount=this_week.invoice_count,
                ),
                overdue=Metric(
                    difference=percent_change(this_week.overdue_count, last_week.overdue_count),
                    amount=this_week.overdue_count,
                ),
            )
