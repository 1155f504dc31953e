"""
Typed rows produced by the validation engine from raw CSV rows.

RawRow is a plain ``dict[str, str]``; these models hold the coerced values
once every rule for the row kind has passed.
"""

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from invoice_pipeline.core.constants import COLUMN_MAX_LENGTHS as WIDTH
from invoice_pipeline.core.constants import MAX_AMOUNT, MAX_WITHHOLDING_TAX

RawRow = dict[str, str]

ROW_KIND_SUPPLIER = "supplier"
ROW_KIND_INVOICE = "invoice"


class InvoiceRow(BaseModel):
    """Validated invoice columns of a CSV row."""

    invoice_id: str = Field(..., min_length=1, max_length=WIDTH["invoice_id"])
    invoice_date: date
    invoice_due_date: date
    invoice_cost: Decimal = Field(..., gt=0, le=Decimal(MAX_AMOUNT))
    invoice_currency: Literal["USD", "EUR", "GBP"]
    invoice_status: Literal["PAID", "PENDING", "OVERDUE"]
    supplier_internal_id: str = Field(..., min_length=1, max_length=WIDTH["supplier_internal_id"])


class SupplierRow(BaseModel):
    """Validated supplier columns of a CSV row."""

    supplier_internal_id: str = Field(..., min_length=1, max_length=WIDTH["supplier_internal_id"])
    supplier_external_id: str = Field(..., min_length=1, max_length=WIDTH["supplier_external_id"])
    supplier_company_name: str = Field(..., max_length=WIDTH["supplier_company_name"])
    supplier_address: str = Field(..., max_length=WIDTH["supplier_address"])
    supplier_city: str = Field(..., max_length=WIDTH["supplier_city"])
    supplier_country: str = Field(..., max_length=WIDTH["supplier_country"])
    supplier_contact_name: str = Field(..., max_length=WIDTH["supplier_contact_name"])
    supplier_phone: str = Field(..., max_length=WIDTH["supplier_phone"])
    supplier_email: str = Field(..., max_length=WIDTH["supplier_email"])
    supplier_bank_code: str = Field(..., max_length=WIDTH["supplier_bank_code"])
    supplier_bank_branch_code: str = Field(..., max_length=WIDTH["supplier_bank_branch_code"])
    supplier_bank_account_number: str
    supplier_status: Literal["ACTIVE", "INACTIVE"]
    supplier_stock_value: Decimal = Field(..., gt=0, le=Decimal(MAX_AMOUNT))
    supplier_withholding_tax: Decimal = Field(..., gt=0, le=Decimal(MAX_WITHHOLDING_TAX))
