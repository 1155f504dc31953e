"""
ValidationResult model representing the outcome of validating a row (ephemeral).
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator


class ValidationResult(BaseModel):
    """
    Outcome of validating a raw row against the rules of one row kind.

    Note: ValidationResult is ephemeral, not persisted to database
    (used in-memory during processing).

    Attributes:
        record_id: Which record was validated
        row_kind: "supplier" or "invoice"
        passed: Overall validation status
        passed_rules: Rules that succeeded
        failed_rules: Rules that failed
        warnings: Non-blocking rules that failed
        errors: First error message per failing field
        processed_payload: Row values after coercion
    """

    record_id: str | None = None
    row_kind: str
    passed: bool
    passed_rules: list[str] = Field(default_factory=list)
    failed_rules: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)
    processed_payload: dict[str, Any] = Field(default_factory=dict)

    @field_validator('failed_rules')
    @classmethod
    def check_passed_consistency(cls, v, info):
        """Validate that passed=True implies failed_rules is empty."""
        if info.data.get('passed') and len(v) > 0:
            raise ValueError("passed=True but failed_rules is not empty")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "record_id": "INV-0001",
                "row_kind": "invoice",
                "passed": False,
                "passed_rules": ["invoice_id_required"],
                "failed_rules": ["invoice_currency_enum"],
                "errors": {
                    "invoice_currency": "Value 'JPY' is not one of USD, EUR, GBP"
                }
            }
        }
