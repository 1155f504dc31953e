"""
Fixed enumerations shared by validation, reference data seeding and analytics.
"""

INVOICE_STATUS_PAID = "PAID"
INVOICE_STATUS_PENDING = "PENDING"
INVOICE_STATUS_OVERDUE = "OVERDUE"

INVOICE_STATUSES = (
    INVOICE_STATUS_PAID,
    INVOICE_STATUS_PENDING,
    INVOICE_STATUS_OVERDUE,
)

CURRENCIES = ("USD", "EUR", "GBP")

SUPPLIER_STATUSES = ("ACTIVE", "INACTIVE")

# DD/MM/YYYY, day 01-31, month 01-12
DATE_PATTERN = r"^(0[1-9]|[12][0-9]|3[01])/(0[1-9]|1[0-2])/\d{4}$"
DATE_FORMAT = "%d/%m/%Y"

DEFAULT_CHUNK_SIZE = 100

INVOICE_COLUMNS = (
    "invoice_id",
    "invoice_date",
    "invoice_due_date",
    "invoice_cost",
    "invoice_currency",
    "invoice_status",
)

SUPPLIER_COLUMNS = (
    "supplier_internal_id",
    "supplier_external_id",
    "supplier_company_name",
    "supplier_address",
    "supplier_city",
    "supplier_country",
    "supplier_contact_name",
    "supplier_phone",
    "supplier_email",
    "supplier_bank_code",
    "supplier_bank_branch_code",
    "supplier_bank_account_number",
    "supplier_status",
    "supplier_stock_value",
    "supplier_withholding_tax",
)

REQUIRED_COLUMNS = INVOICE_COLUMNS + SUPPLIER_COLUMNS

# Widest values the invoice store columns accept
COLUMN_MAX_LENGTHS = {
    "invoice_id": 50,
    "supplier_internal_id": 50,
    "supplier_external_id": 50,
    "supplier_company_name": 100,
    "supplier_address": 255,
    "supplier_city": 100,
    "supplier_country": 50,
    "supplier_contact_name": 100,
    "supplier_phone": 20,
    "supplier_email": 100,
    "supplier_bank_code": 50,
    "supplier_bank_branch_code": 50,
}

MAX_AMOUNT = "99999999.99"  # NUMERIC(10, 2)
MAX_WITHHOLDING_TAX = "999.99"  # NUMERIC(5, 2)
