"""
Pytest configuration and fixtures for invoice-pipeline tests

This module provides shared fixtures for unit and integration tests.
"""
import csv
import datetime
import io
import json
import logging
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from testcontainers.postgres import PostgresContainer

from invoice_pipeline.core.constants import REQUIRED_COLUMNS
from invoice_pipeline.core.errors import DuplicateInvoice
from invoice_pipeline.core.models import Currency, Invoice, InvoiceStatus, Supplier
from invoice_pipeline.observability.logger import JSON_FORMAT, PACKAGE_LOGGER, CustomJsonFormatter
from invoice_pipeline.warehouse.connection import DatabaseConnectionPool
from invoice_pipeline.warehouse.schema_mgmt import SchemaManager

# Processing instant used by every test that needs a clock
NOW = datetime.datetime(2024, 6, 15, 12, 0, 0)


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """
    Start PostgreSQL container for integration tests

    Yields:
        PostgresContainer instance
    """
    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_pipeline",
        password="test_password",
        dbname="test_invoices",
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available for integration tests: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def db_pool(postgres_container) -> Generator[DatabaseConnectionPool, None, None]:
    """
    Connection pool against the test container with the schema created and seeded

    Yields:
        Open DatabaseConnectionPool
    """
    pool = DatabaseConnectionPool(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        database="test_invoices",
        user="test_pipeline",
        password="test_password",
        min_size=1,
        max_size=4,
    )
    pool.open()
    SchemaManager(pool).initialize()

    yield pool

    pool.close()


@pytest.fixture(scope="function")
def clean_db(db_pool) -> DatabaseConnectionPool:
    """
    Provide a clean database by truncating invoices and suppliers before each test

    Reference data is left in place.
    """
    db_pool.execute_command("TRUNCATE TABLE invoices, suppliers CASCADE")
    return db_pool


# =======================
# IN-MEMORY STORE
# =======================

CURRENCY_ROWS = [Currency(id=1, name="USD"), Currency(id=2, name="EUR"), Currency(id=3, name="GBP")]
STATUS_ROWS = [
    InvoiceStatus(id=1, name="PAID"),
    InvoiceStatus(id=2, name="PENDING"),
    InvoiceStatus(id=3, name="OVERDUE"),
]


class InMemoryStore:
    """Store double holding suppliers and invoices in dictionaries."""

    def __init__(self):
        self.currencies = list(CURRENCY_ROWS)
        self.statuses = list(STATUS_ROWS)
        self.suppliers: dict[str, Supplier] = {}
        self.invoices: dict[str, Invoice] = {}
        self.persist_calls: list[tuple[list[Supplier], list[Invoice], int]] = []
        self.persist_error: Exception | None = None
        self.reference_loads = 0
        self.point_lookups: list[str] = []

    def load_currencies(self) -> list[Currency]:
        self.reference_loads += 1
        return list(self.currencies)

    def load_invoice_statuses(self) -> list[InvoiceStatus]:
        return list(self.statuses)

    def find_suppliers(self, internal_ids: list[str]) -> dict[str, Supplier]:
        return {i: self.suppliers[i] for i in internal_ids if i in self.suppliers}

    def find_supplier(self, internal_id: str) -> Supplier | None:
        self.point_lookups.append(internal_id)
        return self.suppliers.get(internal_id)

    def find_existing_invoice_ids(self, invoice_ids: list[str]) -> set[str]:
        return {i for i in invoice_ids if i in self.invoices}

    def persist_batch(self, suppliers, invoices, chunk_size=100) -> int:
        self.persist_calls.append((list(suppliers), list(invoices), chunk_size))
        if self.persist_error is not None:
            raise self.persist_error
        clashes = [invoice.id for invoice in invoices if invoice.id in self.invoices]
        if clashes:
            raise DuplicateInvoice(clashes)
        for supplier in suppliers:
            self.suppliers[supplier.internal_id] = supplier
        for invoice in invoices:
            self.invoices[invoice.id] = invoice
        return len(invoices)

    def clear_all(self) -> dict[str, int]:
        deleted = {"invoices": len(self.invoices), "suppliers": len(self.suppliers)}
        self.invoices.clear()
        self.suppliers.clear()
        return deleted


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime.datetime]:
    return lambda: NOW


# =======================
# ROW FIXTURES
# =======================

def make_row(**overrides: str) -> dict[str, str]:
    """
    Build a complete, valid raw CSV row

    Invoice due one month after NOW so it is not overdue by default.
    """
    row = {
        "invoice_id": "INV1",
        "invoice_date": "01/06/2024",
        "invoice_due_date": "15/07/2024",
        "invoice_cost": "100.00",
        "invoice_currency": "USD",
        "invoice_status": "PENDING",
        "supplier_internal_id": "S1",
        "supplier_external_id": "EXT-1",
        "supplier_company_name": "Acme Ltd",
        "supplier_address": "1 Main Street",
        "supplier_city": "London",
        "supplier_country": "UK",
        "supplier_contact_name": "Jane Roe",
        "supplier_phone": "+44 20 0000 0000",
        "supplier_email": "jane@acme.example",
        "supplier_bank_code": "001",
        "supplier_bank_branch_code": "0101",
        "supplier_bank_account_number": "12345678",
        "supplier_status": "ACTIVE",
        "supplier_stock_value": "1500.00",
        "supplier_withholding_tax": "2.50",
    }
    row.update(overrides)
    return row


def write_csv(path: Path, rows: list[dict[str, str]], columns=REQUIRED_COLUMNS) -> Path:
    """Write rows to a CSV file with a header row"""
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(columns), extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)
    return path


@pytest.fixture
def valid_row() -> dict[str, str]:
    return make_row()


@pytest.fixture
def csv_file(tmp_path) -> Callable[..., Path]:
    """Factory writing rows to a CSV file in tmp_path"""
    def _write(rows: list[dict[str, str]], name: str = "invoices.csv", columns=REQUIRED_COLUMNS) -> Path:
        return write_csv(tmp_path / name, rows, columns)
    return _write


# =======================
# LOGGING FIXTURES
# =======================

@pytest.fixture
def json_logs() -> Generator[Callable[[], list[dict]], None, None]:
    """
    Route package log records through the JSON formatter into a buffer

    Yields a function returning every record emitted so far, parsed.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    saved_level, saved_handlers = package_logger.level, list(package_logger.handlers)

    buffer = io.StringIO()
    handler = logging.StreamHandler(buffer)
    handler.setFormatter(CustomJsonFormatter(fmt=JSON_FORMAT))
    package_logger.handlers[:] = [handler]
    package_logger.setLevel(logging.DEBUG)

    def _records() -> list[dict]:
        return [json.loads(line) for line in buffer.getvalue().splitlines() if line.strip()]

    yield _records

    package_logger.setLevel(saved_level)
    package_logger.handlers[:] = saved_handlers
