"""
Invoice store operations.

Reads reference data and suppliers, checks for existing invoices and writes
a fully built ingestion batch inside a single transaction.
"""

import re
from typing import Any

import psycopg
from psycopg import errors as pg_errors

from invoice_pipeline.core.errors import DuplicateInvoice, IngestionInProgress, StorageFailure
from invoice_pipeline.core.models import Currency, Invoice, InvoiceStatus, Supplier
from invoice_pipeline.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

# pg_try_advisory_xact_lock key shared by every ingestion writer
INGESTION_LOCK_KEY = 7_341_150_223

SUPPLIER_FIELDS = (
    "internal_id",
    "external_id",
    "company_name",
    "address",
    "city",
    "country",
    "contact_name",
    "phone",
    "email",
    "bank_code",
    "bank_branch_code",
    "bank_account_number",
    "status",
    "stock_value",
    "withholding_tax",
)

SUPPLIER_SELECT = f"SELECT {', '.join(SUPPLIER_FIELDS)} FROM suppliers"

SUPPLIER_INSERT = f"""
    INSERT INTO suppliers ({', '.join(SUPPLIER_FIELDS)})
    VALUES ({', '.join(f'%({name})s' for name in SUPPLIER_FIELDS)})
"""

INVOICE_INSERT = """
    INSERT INTO invoices (
        id, date, due_date, cost, currency_id, status_id, supplier_internal_id
    )
    VALUES (
        %(id)s, %(date)s, %(due_date)s, %(cost)s,
        %(currency_id)s, %(status_id)s, %(supplier_internal_id)s
    )
"""

_KEY_DETAIL = re.compile(r"Key \(id\)=\((?P<id>.*)\) already exists")


class InvoiceStore:
    """
    PostgreSQL-backed store for suppliers, invoices and reference data.

    Database errors are raised as StorageFailure; unique violations on the
    invoice key are raised as DuplicateInvoice.
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize invoice store.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def _query(self, operation: str, query: str, params: Any = None) -> list[dict]:
        try:
            return self.pool.execute_query(query, params)
        except psycopg.Error as e:
            logger.error(f"Failed to {operation}: {e}", extra={"operation": operation})
            raise StorageFailure(f"Failed to {operation}: {e}") from e

    # =======================
    # REFERENCE DATA
    # =======================

    def load_currencies(self) -> list[Currency]:
        rows = self._query("load currencies", "SELECT id, name FROM currency ORDER BY id")
        return [Currency.model_validate(row) for row in rows]

    def load_invoice_statuses(self) -> list[InvoiceStatus]:
        rows = self._query(
            "load invoice statuses", "SELECT id, name FROM invoice_status ORDER BY id"
        )
        return [InvoiceStatus.model_validate(row) for row in rows]

    # =======================
    # SUPPLIERS
    # =======================

    def find_suppliers(self, internal_ids: list[str]) -> dict[str, Supplier]:
        """
        Look up suppliers by internal id.

        Args:
            internal_ids: Ids to look up

        Returns:
            Mapping of internal id to Supplier for the ids that exist
        """
        if not internal_ids:
            return {}

        rows = self._query(
            "find suppliers",
            f"{SUPPLIER_SELECT} WHERE internal_id = ANY(%s)",
            (list(internal_ids),),
        )
        return {row["internal_id"]: Supplier.model_validate(row) for row in rows}

    def find_supplier(self, internal_id: str) -> Supplier | None:
        rows = self._query(
            "find supplier", f"{SUPPLIER_SELECT} WHERE internal_id = %s", (internal_id,)
        )
        return Supplier.model_validate(rows[0]) if rows else None

    def list_suppliers(self) -> list[Supplier]:
        rows = self._query("list suppliers", f"{SUPPLIER_SELECT} ORDER BY internal_id")
        return [Supplier.model_validate(row) for row in rows]

    # =======================
    # INVOICES
    # =======================

    def find_existing_invoice_ids(self, invoice_ids: list[str]) -> set[str]:
        """
        Return the subset of invoice ids already present in the store.

        Args:
            invoice_ids: Candidate invoice ids

        Returns:
            Set of ids that already exist
        """
        if not invoice_ids:
            return set()

        rows = self._query(
            "check existing invoices",
            "SELECT id FROM invoices WHERE id = ANY(%s)",
            (list(invoice_ids),),
        )
        return {row["id"] for row in rows}

    def count_invoices(self) -> int:
        rows = self._query("count invoices", "SELECT COUNT(*) AS total FROM invoices")
        return int(rows[0]["total"]) if rows else 0

    def persist_batch(
        self,
        suppliers: list[Supplier],
        invoices: list[Invoice],
        chunk_size: int = 100,
    ) -> int:
        """
        Write new suppliers then invoices in one transaction.

        Invoices are sent in chunks of chunk_size rows. Any failure rolls
        back the whole batch.

        Args:
            suppliers: Suppliers to create
            invoices: Invoices to create
            chunk_size: Invoices per executemany call

        Returns:
            Number of invoices written

        Raises:
            IngestionInProgress: If another writer holds the ingestion lock
            DuplicateInvoice: If an invoice id already exists
            StorageFailure: On any other database error
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        try:
            with self.pool.transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        "SELECT pg_try_advisory_xact_lock(%s) AS locked", (INGESTION_LOCK_KEY,)
                    )
                    row = cur.fetchone()
                    if not row or not row["locked"]:
                        raise IngestionInProgress(
                            "Another ingestion is writing to the invoice store"
                        )

                    if suppliers:
                        cur.executemany(
                            SUPPLIER_INSERT,
                            [supplier.model_dump(include=set(SUPPLIER_FIELDS)) for supplier in suppliers],
                        )

                    for start in range(0, len(invoices), chunk_size):
                        chunk = invoices[start:start + chunk_size]
                        cur.executemany(INVOICE_INSERT, [_invoice_params(inv) for inv in chunk])
                        logger.debug(
                            f"Wrote invoice chunk {start // chunk_size + 1}",
                            extra={"chunk_start": start, "chunk_rows": len(chunk)},
                        )

        except pg_errors.UniqueViolation as e:
            if e.diag.table_name == "invoices":
                duplicate_ids = _duplicate_ids(e, invoices)
                logger.error(
                    "Invoice unique violation during persist",
                    extra={"invoice_ids": duplicate_ids},
                )
                raise DuplicateInvoice(duplicate_ids) from e
            logger.error(f"Unique violation on {e.diag.table_name}: {e}")
            raise StorageFailure(f"Failed to persist batch: {e}") from e
        except psycopg.Error as e:
            logger.error(f"Failed to persist batch: {e}")
            raise StorageFailure(f"Failed to persist batch: {e}") from e

        logger.info(
            "Batch persisted",
            extra={"suppliers": len(suppliers), "invoices": len(invoices)},
        )
        return len(invoices)

    def clear_all(self) -> dict[str, int]:
        """
        Delete every invoice and supplier.

        Returns:
            Rows deleted per table
        """
        try:
            with self.pool.transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM invoices")
                    invoices_deleted = cur.rowcount
                    cur.execute("DELETE FROM suppliers")
                    suppliers_deleted = cur.rowcount
        except psycopg.Error as e:
            logger.error(f"Failed to clear invoice store: {e}")
            raise StorageFailure(f"Failed to clear invoice store: {e}") from e

        deleted = {"invoices": invoices_deleted, "suppliers": suppliers_deleted}
        logger.warning("Invoice store cleared", extra={"deleted": deleted})
        return deleted


def _invoice_params(invoice: Invoice) -> dict[str, Any]:
    return {
        "id": invoice.id,
        "date": invoice.date,
        "due_date": invoice.due_date,
        "cost": invoice.cost,
        "currency_id": invoice.currency.id,
        "status_id": invoice.status.id,
        "supplier_internal_id": invoice.supplier_internal_id,
    }


def _duplicate_ids(error: pg_errors.UniqueViolation, invoices: list[Invoice]) -> list[str]:
    match = _KEY_DETAIL.search(error.diag.message_detail or "")
    if match:
        return [match.group("id")]
    return [invoice.id for invoice in invoices]
