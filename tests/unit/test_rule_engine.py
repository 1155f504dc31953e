"""
Unit tests for rule engine and rule configuration.
"""

from decimal import Decimal

import pytest

from invoice_pipeline.core.rules import (
    RuleConfigBuilder,
    RuleConfigLoader,
    RuleEngine,
    invoice_rules,
    supplier_rules,
)
from conftest import make_row


class TestRuleEngine:
    """Tests for RuleEngine"""

    def test_validate_record_all_pass(self):
        """Test validation passes and values are coerced"""
        rules = RuleConfigBuilder() \
            .add_required_field("invoice_id") \
            .add_required_field("invoice_cost") \
            .add_type_check("invoice_cost", "decimal") \
            .add_positive("invoice_cost") \
            .build()

        engine = RuleEngine(rules, row_kind="invoice")

        result = engine.validate_record({"invoice_id": "INV1", "invoice_cost": "99.99"}, record_id="INV1")

        assert result.passed is True
        assert result.failed_rules == []
        assert result.row_kind == "invoice"
        assert result.record_id == "INV1"
        assert result.processed_payload["invoice_cost"] == Decimal("99.99")

    def test_first_failure_stops_the_field(self):
        """Test a field reports only its first failing rule"""
        rules = RuleConfigBuilder() \
            .add_required_field("invoice_cost") \
            .add_type_check("invoice_cost", "decimal") \
            .add_positive("invoice_cost") \
            .build()

        engine = RuleEngine(rules)

        result = engine.validate_record({"invoice_cost": ""})

        assert result.passed is False
        assert result.failed_rules == ["invoice_cost_required"]
        assert "empty" in result.errors["invoice_cost"]

    def test_all_failing_fields_collected(self):
        """Test every failing field of the row is reported"""
        engine = RuleEngine(invoice_rules(), row_kind="invoice")

        row = make_row(invoice_cost="-5", invoice_currency="JPY", invoice_date="2024-01-01")
        result = engine.validate_record(row)

        assert result.passed is False
        assert set(result.errors) == {"invoice_cost", "invoice_currency", "invoice_date"}

    def test_warning_severity_does_not_fail(self):
        rules = [
            {
                "rule_name": "email_format",
                "rule_type": "regex",
                "field_name": "supplier_email",
                "parameters": {"pattern": r"^\S+@\S+$"},
                "severity": "warning",
            }
        ]
        engine = RuleEngine(rules)

        result = engine.validate_record({"supplier_email": "nope"})

        assert result.passed is True
        assert result.warnings == ["email_format"]

    def test_disabled_rules_are_skipped(self):
        rules = RuleConfigBuilder().add_required_field("invoice_id").build()
        rules[0]["enabled"] = False

        engine = RuleEngine(rules)

        assert engine.validate_record({}).passed is True
        assert engine.field_names == []

    def test_unknown_rule_type(self):
        with pytest.raises(ValueError, match="Unknown rule type"):
            RuleEngine([{"rule_name": "x", "rule_type": "checksum", "field_name": "invoice_id"}])

    def test_field_names_in_declaration_order(self):
        engine = RuleEngine(invoice_rules())

        assert engine.field_names[:3] == ["invoice_id", "invoice_date", "invoice_due_date"]

    def test_length_rule_after_required_sees_stripped_value(self):
        rules = RuleConfigBuilder() \
            .add_required_field("supplier_phone") \
            .add_max_length("supplier_phone", 5) \
            .build()

        engine = RuleEngine(rules)

        assert engine.validate_record({"supplier_phone": "  12345  "}).passed
        result = engine.validate_record({"supplier_phone": "123456"})
        assert result.failed_rules == ["supplier_phone_length"]


class TestDefaultRules:
    """Tests for the built-in invoice and supplier rules"""

    def test_valid_row_passes_both_kinds(self, valid_row):
        assert RuleEngine(invoice_rules()).validate_record(valid_row).passed
        assert RuleEngine(supplier_rules()).validate_record(valid_row).passed

    def test_bank_fields_may_be_empty(self):
        row = make_row(supplier_bank_code="", supplier_bank_branch_code="", supplier_bank_account_number="")

        assert RuleEngine(supplier_rules()).validate_record(row).passed

    def test_bank_fields_must_be_present(self, valid_row):
        del valid_row["supplier_bank_code"]

        result = RuleEngine(supplier_rules()).validate_record(valid_row)

        assert "supplier_bank_code" in result.errors

    @pytest.mark.parametrize("field", ["supplier_stock_value", "supplier_withholding_tax"])
    def test_supplier_amounts_must_be_positive(self, field):
        row = make_row(**{field: "0"})

        result = RuleEngine(supplier_rules()).validate_record(row)

        assert field in result.errors

    def test_supplier_status_enumeration(self):
        result = RuleEngine(supplier_rules()).validate_record(make_row(supplier_status="DORMANT"))

        assert "ACTIVE, INACTIVE" in result.errors["supplier_status"]

    @pytest.mark.parametrize("value,passed", [("999.99", True), ("1000", False), ("999.991", False)])
    def test_withholding_tax_fits_its_column(self, value, passed):
        result = RuleEngine(supplier_rules()).validate_record(make_row(supplier_withholding_tax=value))

        assert result.passed is passed

    def test_cost_capped_at_largest_storable_amount(self):
        result = RuleEngine(invoice_rules()).validate_record(make_row(invoice_cost="100000000"))

        assert "exceeds maximum 99999999.99" in result.errors["invoice_cost"]

    def test_bank_account_number_has_no_width(self):
        row = make_row(supplier_bank_account_number="9" * 300)

        assert RuleEngine(supplier_rules()).validate_record(row).passed


class TestRuleConfigLoader:
    """Tests for RuleConfigLoader"""

    def test_load_rules_per_row_kind(self, tmp_path):
        config = tmp_path / "rules.yaml"
        config.write_text(
            """
invoice:
  invoice_id:
    - type: required_field
  invoice_cost:
    - type: type_check
      params:
        expected_type: decimal
    - type: range
      name: cost_positive
      params:
        min_exclusive: 0
"""
        )

        loader = RuleConfigLoader(config)
        rules = loader.load_rules("invoice")

        assert [r["rule_name"] for r in rules] == [
            "invoice_id_required_field_0",
            "invoice_cost_type_check_0",
            "cost_positive",
        ]
        assert rules[2]["parameters"] == {"min_exclusive": 0}
        assert loader.load_rules("supplier") is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuleConfigLoader(tmp_path / "missing.yaml")

    def test_rule_without_type(self, tmp_path):
        config = tmp_path / "rules.yaml"
        config.write_text("invoice:\n  invoice_id:\n    - params: {}\n")

        with pytest.raises(ValueError, match="missing 'type'"):
            RuleConfigLoader(config).load_rules("invoice")

    def test_invalid_severity(self, tmp_path):
        config = tmp_path / "rules.yaml"
        config.write_text("invoice:\n  invoice_id:\n    - type: required_field\n      severity: fatal\n")

        with pytest.raises(ValueError, match="Invalid severity"):
            RuleConfigLoader(config).load_rules("invoice")

    def test_empty_file(self, tmp_path):
        config = tmp_path / "rules.yaml"
        config.write_text("")

        with pytest.raises(ValueError):
            RuleConfigLoader(config).load_rules("invoice")
