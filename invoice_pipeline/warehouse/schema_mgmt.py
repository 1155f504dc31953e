"""
Schema management operations for the invoice store.

Handles DDL for the reference, supplier and invoice tables and seeding of
the fixed enumerations.
"""

from invoice_pipeline.core.constants import CURRENCIES, INVOICE_STATUSES
from invoice_pipeline.observability.logger import get_logger

from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

TABLE_DDL = [
    """
    CREATE TABLE IF NOT EXISTS currency (
        id SERIAL PRIMARY KEY,
        name VARCHAR(10) NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS invoice_status (
        id SERIAL PRIMARY KEY,
        name VARCHAR(20) NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS suppliers (
        internal_id VARCHAR(50) PRIMARY KEY,
        external_id VARCHAR(50),
        company_name VARCHAR(100) NOT NULL,
        address VARCHAR(255) NOT NULL,
        city VARCHAR(100) NOT NULL,
        country VARCHAR(50) NOT NULL,
        contact_name VARCHAR(100) NOT NULL,
        phone VARCHAR(20) NOT NULL,
        email VARCHAR(100) NOT NULL,
        bank_code VARCHAR(50) NOT NULL,
        bank_branch_code VARCHAR(50) NOT NULL,
        bank_account_number TEXT NOT NULL,
        status VARCHAR(20) NOT NULL DEFAULT 'ACTIVE'
            CHECK (status IN ('ACTIVE', 'INACTIVE')),
        stock_value NUMERIC(10, 2) NOT NULL,
        withholding_tax NUMERIC(5, 2) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS invoices (
        id VARCHAR(50) PRIMARY KEY,
        date DATE NOT NULL,
        due_date DATE NOT NULL,
        cost NUMERIC(10, 2) NOT NULL CHECK (cost > 0),
        currency_id INTEGER NOT NULL REFERENCES currency (id),
        status_id INTEGER NOT NULL REFERENCES invoice_status (id),
        supplier_internal_id VARCHAR(50) NOT NULL REFERENCES suppliers (internal_id)
    )
    """,
]

INDEX_DDL = [
    "CREATE INDEX IF NOT EXISTS idx_invoices_status ON invoices (status_id)",
    "CREATE INDEX IF NOT EXISTS idx_invoices_currency ON invoices (currency_id)",
    "CREATE INDEX IF NOT EXISTS idx_invoices_supplier ON invoices (supplier_internal_id)",
    "CREATE INDEX IF NOT EXISTS idx_invoices_dates ON invoices (date, due_date)",
    (
        "CREATE INDEX IF NOT EXISTS idx_invoices_status_due_supplier "
        "ON invoices (status_id, due_date, supplier_internal_id)"
    ),
    "CREATE INDEX IF NOT EXISTS idx_suppliers_external_id ON suppliers (external_id)",
]

TABLES = ("currency", "invoice_status", "suppliers", "invoices")


class SchemaManager:
    """
    Manages the invoice store schema.

    Handles:
    - Creating tables and indexes (idempotent)
    - Seeding currencies and invoice statuses
    - Checking table existence
    """

    def __init__(self, pool: DatabaseConnectionPool):
        """
        Initialize schema manager.

        Args:
            pool: Database connection pool
        """
        self.pool = pool

    def create_tables(self) -> None:
        """Create all tables and indexes if they do not exist."""
        with self.pool.transaction() as conn:
            with conn.cursor() as cur:
                for statement in TABLE_DDL + INDEX_DDL:
                    cur.execute(statement)
        logger.info("Invoice store schema created", extra={"tables": list(TABLES)})

    def seed_reference_data(self) -> dict[str, int]:
        """
        Insert any missing currencies and invoice statuses.

        Returns:
            Number of rows inserted per table
        """
        inserted = {"currency": 0, "invoice_status": 0}
        with self.pool.transaction() as conn:
            with conn.cursor() as cur:
                for name in CURRENCIES:
                    cur.execute(
                        "INSERT INTO currency (name) VALUES (%s) ON CONFLICT (name) DO NOTHING",
                        (name,),
                    )
                    inserted["currency"] += cur.rowcount
                for name in INVOICE_STATUSES:
                    cur.execute(
                        "INSERT INTO invoice_status (name) VALUES (%s) ON CONFLICT (name) DO NOTHING",
                        (name,),
                    )
                    inserted["invoice_status"] += cur.rowcount

        logger.info("Reference data seeded", extra={"inserted": inserted})
        return inserted

    def initialize(self) -> dict[str, int]:
        """Create the schema and seed reference data."""
        self.create_tables()
        return self.seed_reference_data()

    def table_exists(self, table_name: str) -> bool:
        """
        Check whether a table exists in the current schema.

        Args:
            table_name: Table name

        Returns:
            True if the table exists
        """
        result = self.pool.execute_query(
            """
            SELECT EXISTS (
                SELECT 1 FROM information_schema.tables
                WHERE table_schema = current_schema() AND table_name = %s
            ) AS exists
            """,
            (table_name,),
        )
        return bool(result[0]["exists"]) if result else False
