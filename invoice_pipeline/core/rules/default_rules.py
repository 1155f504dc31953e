"""
Built-in validation rules for supplier and invoice rows.
"""

from typing import Any

from invoice_pipeline.core.constants import (
    COLUMN_MAX_LENGTHS,
    CURRENCIES,
    INVOICE_STATUSES,
    MAX_AMOUNT,
    MAX_WITHHOLDING_TAX,
    SUPPLIER_STATUSES,
)

from .rule_config import RuleConfigBuilder

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def invoice_rules() -> list[dict[str, Any]]:
    """Rules for the invoice columns of a row."""
    return (
        RuleConfigBuilder()
        .add_required_field("invoice_id")
        .add_max_length("invoice_id", COLUMN_MAX_LENGTHS["invoice_id"])
        .add_required_field("invoice_date")
        .add_date("invoice_date")
        .add_required_field("invoice_due_date")
        .add_date("invoice_due_date")
        .add_required_field("invoice_cost")
        .add_type_check("invoice_cost", "decimal")
        .add_positive("invoice_cost", max_value=MAX_AMOUNT)
        .add_required_field("invoice_currency")
        .add_enum("invoice_currency", CURRENCIES)
        .add_required_field("invoice_status")
        .add_enum("invoice_status", INVOICE_STATUSES)
        .add_required_field("supplier_internal_id")
        .build()
    )


def supplier_rules() -> list[dict[str, Any]]:
    """Rules for the supplier columns of a row."""
    builder = RuleConfigBuilder()
    for field_name in (
        "supplier_internal_id",
        "supplier_external_id",
        "supplier_company_name",
        "supplier_address",
        "supplier_city",
        "supplier_country",
        "supplier_contact_name",
        "supplier_phone",
    ):
        builder.add_required_field(field_name)

    # bank details may be blank but the columns must exist
    for field_name in (
        "supplier_bank_code",
        "supplier_bank_branch_code",
        "supplier_bank_account_number",
    ):
        builder.add_required_field(field_name, allow_empty_string=True)

    builder.add_required_field("supplier_email")
    builder.add_regex("supplier_email", EMAIL_PATTERN, message="Invalid email format")

    for field_name, max_length in COLUMN_MAX_LENGTHS.items():
        if field_name.startswith("supplier_"):
            builder.add_max_length(field_name, max_length)

    return (
        builder
        .add_required_field("supplier_status")
        .add_enum("supplier_status", SUPPLIER_STATUSES)
        .add_required_field("supplier_stock_value")
        .add_type_check("supplier_stock_value", "decimal")
        .add_positive("supplier_stock_value", max_value=MAX_AMOUNT)
        .add_required_field("supplier_withholding_tax")
        .add_type_check("supplier_withholding_tax", "decimal")
        .add_positive("supplier_withholding_tax", max_value=MAX_WITHHOLDING_TAX)
        .build()
    )
