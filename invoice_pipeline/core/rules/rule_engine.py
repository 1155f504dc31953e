"""
Rule engine for orchestrating validation rules on raw rows.

The rule engine loads validation rules, applies them to rows field by field,
carries coerced values from one rule to the next and produces validation results.
"""

from typing import Any

from invoice_pipeline.core.models import ValidationResult
from invoice_pipeline.core.validators import (
    BaseValidator,
    DateValidator,
    EnumValidator,
    LengthValidator,
    RangeValidator,
    RegexValidator,
    RequiredFieldValidator,
    TypeValidator,
    ValidationError,
)


class RuleEngine:
    """
    Orchestrates validation rules on rows of one kind.

    Rules for a field run in declaration order. The first failing rule of a
    field stops that field; other fields are still checked so every problem
    in the row is reported together.
    """

    VALIDATOR_REGISTRY = {
        "required_field": RequiredFieldValidator,
        "type_check": TypeValidator,
        "range": RangeValidator,
        "regex": RegexValidator,
        "enum": EnumValidator,
        "date": DateValidator,
        "length": LengthValidator,
    }

    def __init__(self, rules: list[dict[str, Any]], row_kind: str = "row"):
        """
        Initialize the rule engine with validation rules.

        Args:
            rules: List of rule configurations, each containing:
                   - rule_name: str
                   - rule_type: str (required_field, type_check, range, regex, enum, date, length)
                   - field_name: str
                   - parameters: Dict[str, Any] (optional)
                   - severity: str (error or warning)
                   - enabled: bool (default True)
            row_kind: Label recorded on every ValidationResult
        """
        self.rules = rules
        self.row_kind = row_kind
        self.validators: list[tuple[str, str, BaseValidator]] = []
        self._build_validators()

    def _build_validators(self) -> None:
        """Build validator instances from rule configurations."""
        for rule in self.rules:
            if not rule.get("enabled", True):
                continue

            rule_name = rule["rule_name"]
            rule_type = rule["rule_type"]
            field_name = rule["field_name"]
            parameters = rule.get("parameters", {})
            severity = rule.get("severity", "error")

            validator_class = self.VALIDATOR_REGISTRY.get(rule_type)
            if not validator_class:
                raise ValueError(f"Unknown rule type: {rule_type}")

            try:
                validator = validator_class(field_name, parameters)
            except Exception as e:
                raise ValueError(f"Failed to create validator for rule '{rule_name}': {e}") from e
            self.validators.append((rule_name, severity, validator))

    @property
    def field_names(self) -> list[str]:
        """Fields covered by at least one rule, in declaration order."""
        return list(dict.fromkeys(v.field_name for _, _, v in self.validators))

    def validate_record(
        self,
        payload: dict[str, Any],
        record_id: str | None = None,
    ) -> ValidationResult:
        """
        Validate a row against all rules.

        Args:
            payload: Raw column -> value mapping
            record_id: Identifier used in results and error messages

        Returns:
            ValidationResult with pass/fail status, the first error per
            failing field and the coerced payload
        """
        passed_rules = []
        failed_rules = []
        warnings = []
        errors: dict[str, str] = {}
        processed = dict(payload)

        for rule_name, severity, validator in self.validators:
            field_name = validator.field_name

            # A field that already failed is not checked further
            if field_name in errors:
                continue

            try:
                processed[field_name] = validator.validate(processed.get(field_name), processed)
                passed_rules.append(rule_name)
            except ValidationError as e:
                if severity == "error":
                    failed_rules.append(rule_name)
                    errors[field_name] = e.message
                else:
                    warnings.append(rule_name)

        passed = len(failed_rules) == 0

        return ValidationResult(
            record_id=record_id,
            row_kind=self.row_kind,
            passed=passed,
            passed_rules=passed_rules,
            failed_rules=failed_rules,
            warnings=warnings,
            errors=errors,
            processed_payload=processed,
        )
