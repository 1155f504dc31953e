"""
Prometheus metrics collection for invoice-pipeline

This module provides metrics instrumentation for monitoring
ingestion runs, data quality and analytics query performance.
"""
import os
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# INGESTION METRICS
# =======================

ingestion_runs_total = Counter(
    name="invoice_ingestion_runs_total",
    documentation="Total number of ingestion runs",
    labelnames=["status"],  # status: success, failure
    registry=REGISTRY,
)

ingested_records_total = Counter(
    name="invoice_ingested_records_total",
    documentation="Total number of records persisted by ingestion",
    labelnames=["entity"],  # entity: invoice, supplier
    registry=REGISTRY,
)

ingestion_duration_seconds = Histogram(
    name="invoice_ingestion_duration_seconds",
    documentation="Time spent on a full ingestion run in seconds",
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)

ingestion_batch_rows = Histogram(
    name="invoice_ingestion_batch_rows",
    documentation="Number of rows per ingested file",
    buckets=[1, 10, 50, 100, 500, 1000, 5000, 10000],
    registry=REGISTRY,
)

overdue_overrides_total = Counter(
    name="invoice_overdue_overrides_total",
    documentation="Invoices whose status was forced to OVERDUE by the due date rule",
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

validation_failures_total = Counter(
    name="invoice_validation_failures_total",
    documentation="Total number of field validation failures",
    labelnames=["row_kind", "field_name"],
    registry=REGISTRY,
)

# =======================
# ANALYTICS METRICS
# =======================

analytics_queries_total = Counter(
    name="invoice_analytics_queries_total",
    documentation="Total number of analytics queries",
    labelnames=["query", "status"],
    registry=REGISTRY,
)

analytics_query_duration_seconds = Histogram(
    name="invoice_analytics_query_duration_seconds",
    documentation="Analytics query latency in seconds",
    labelnames=["query"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
    registry=REGISTRY,
)

# =======================
# ERROR METRICS
# =======================

errors_total = Counter(
    name="invoice_pipeline_errors_total",
    documentation="Total number of errors",
    labelnames=["error_kind", "component"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Content type for the Prometheus text format"""
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(analytics_query_duration_seconds, query="monthly_totals"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        metric = self.histogram.labels(**self.labels) if self.labels else self.histogram
        self.timer = metric.time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


# =======================
# PIPELINE HELPERS
# =======================

def record_ingestion(
    total_rows: int,
    suppliers_created: int,
    invoices_persisted: int,
    overdue_overrides: int,
    duration_seconds: float,
) -> None:
    """
    Record metrics for a successful ingestion run.

    Args:
        total_rows: Rows read from the file
        suppliers_created: Suppliers inserted
        invoices_persisted: Invoices inserted
        overdue_overrides: Invoices forced to OVERDUE
        duration_seconds: Run duration in seconds
    """
    increment_counter(ingestion_runs_total, 1, status="success")
    increment_counter(ingested_records_total, suppliers_created, entity="supplier")
    increment_counter(ingested_records_total, invoices_persisted, entity="invoice")
    increment_counter(overdue_overrides_total, overdue_overrides)
    ingestion_batch_rows.observe(total_rows)
    ingestion_duration_seconds.observe(duration_seconds)


def record_ingestion_failure(error_kind: str) -> None:
    """Record a failed ingestion run."""
    increment_counter(ingestion_runs_total, 1, status="failure")
    increment_counter(errors_total, 1, error_kind=error_kind, component="ingestion")


def record_validation_failure(row_kind: str, field_name: str) -> None:
    """
    Record a validation failure.

    Args:
        row_kind: "supplier" or "invoice"
        field_name: Name of field that failed validation
    """
    increment_counter(validation_failures_total, 1, row_kind=row_kind, field_name=field_name)


def record_analytics_query(query: str, success: bool) -> None:
    """Record the outcome of an analytics query."""
    increment_counter(analytics_queries_total, 1, query=query, status="success" if success else "failure")
    if not success:
        increment_counter(errors_total, 1, error_kind="analytics_query_failed", component="analytics")
