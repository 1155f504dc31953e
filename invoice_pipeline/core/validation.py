"""
Row validation: raw CSV rows in, typed supplier/invoice rows out.

The validator is pure; it performs no I/O once its rule engines are built.
"""

from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from invoice_pipeline.core.errors import ValidationFailed
from invoice_pipeline.core.models import (
    ROW_KIND_INVOICE,
    ROW_KIND_SUPPLIER,
    InvoiceRow,
    RawRow,
    SupplierRow,
)
from invoice_pipeline.core.rules import (
    RuleConfigLoader,
    RuleEngine,
    invoice_rules,
    supplier_rules,
)
from invoice_pipeline.observability import metrics
from invoice_pipeline.observability.logger import get_logger

logger = get_logger(__name__)

ROW_MODELS = {
    ROW_KIND_SUPPLIER: SupplierRow,
    ROW_KIND_INVOICE: InvoiceRow,
}

RECORD_ID_FIELDS = {
    ROW_KIND_SUPPLIER: "supplier_internal_id",
    ROW_KIND_INVOICE: "invoice_id",
}


class RowValidator:
    """
    Validates raw rows as suppliers or invoices.

    Uses the built-in rules unless a YAML rules file provides a section for
    a row kind, in which case that section replaces the built-in rules.
    """

    def __init__(self, rules_path: str | Path | None = None):
        """
        Initialize the row validator.

        Args:
            rules_path: Optional YAML file overriding the built-in rules
        """
        rules = {
            ROW_KIND_SUPPLIER: supplier_rules(),
            ROW_KIND_INVOICE: invoice_rules(),
        }

        if rules_path:
            loader = RuleConfigLoader(rules_path)
            for kind in rules:
                override = loader.load_rules(kind)
                if override is not None:
                    logger.info(f"Using {kind} validation rules from {rules_path}")
                    rules[kind] = override

        self.engines = {kind: RuleEngine(kind_rules, row_kind=kind) for kind, kind_rules in rules.items()}

    def validate(self, row: RawRow, kind: str) -> SupplierRow | InvoiceRow:
        """
        Validate and coerce a raw row.

        Args:
            row: Column -> string mapping from the CSV reader
            kind: "supplier" or "invoice"

        Returns:
            SupplierRow or InvoiceRow with typed values

        Raises:
            ValueError: If kind is unknown
            ValidationFailed: With every failing field of the row
        """
        engine = self.engines.get(kind)
        if engine is None:
            raise ValueError(f"Unknown row kind: {kind}")

        record_id = row.get(RECORD_ID_FIELDS[kind])
        result = engine.validate_record(row, record_id=record_id)

        if not result.passed:
            for field_name in result.errors:
                metrics.record_validation_failure(kind, field_name)
            logger.error(
                f"Validation failed for {kind} row {record_id}",
                extra={"row_kind": kind, "record_id": record_id, "errors": result.errors},
            )
            raise ValidationFailed(kind, record_id, result.errors)

        payload: dict[str, Any] = {
            name: result.processed_payload.get(name)
            for name in ROW_MODELS[kind].model_fields
        }
        try:
            return ROW_MODELS[kind].model_validate(payload)
        except PydanticValidationError as e:
            # only reachable when a rules override leaves a field unchecked
            errors = {
                ".".join(str(loc) for loc in err["loc"]): err["msg"]
                for err in e.errors()
            }
            raise ValidationFailed(kind, record_id, errors) from e

    def validate_supplier(self, row: RawRow) -> SupplierRow:
        return self.validate(row, ROW_KIND_SUPPLIER)

    def validate_invoice(self, row: RawRow) -> InvoiceRow:
        return self.validate(row, ROW_KIND_INVOICE)
