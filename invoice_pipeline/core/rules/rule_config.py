"""
Rule configuration management.

Loads validation rules from YAML files and provides utilities
for building rule configurations in code.
"""

from pathlib import Path
from typing import Any

import yaml


class RuleConfigLoader:
    """
    Loads validation rules from YAML configuration files.

    Rules are grouped by row kind. Expected YAML format:
    ```yaml
    invoice:
      invoice_id:
        - type: required_field
      invoice_cost:
        - type: required_field
        - type: type_check
          params:
            expected_type: decimal
        - type: range
          params:
            min_exclusive: 0

    supplier:
      supplier_email:
        - type: required_field
        - type: regex
          params:
            pattern: "^[^@\\s]+@[^@\\s]+\\.[^@\\s]+$"
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the rule config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")

    def load_rules(self, row_kind: str) -> list[dict[str, Any]] | None:
        """
        Load and parse the validation rules of one row kind.

        Args:
            row_kind: "invoice" or "supplier"

        Returns:
            List of rule dictionaries suitable for RuleEngine, or None when
            the file has no section for this kind

        Raises:
            ValueError: If YAML is invalid or missing required fields
        """
        with open(self.config_path) as f:
            config = yaml.safe_load(f)

        if not config or not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping of row kinds")

        if row_kind not in config:
            return None

        rules = []
        for field_name, field_rule_list in config[row_kind].items():
            if not isinstance(field_rule_list, list):
                raise ValueError(f"Rules for field '{field_name}' must be a list")

            for idx, rule_def in enumerate(field_rule_list):
                rules.append(self._parse_rule(field_name, rule_def, idx))

        return rules

    def _parse_rule(self, field_name: str, rule_def: dict[str, Any], idx: int) -> dict[str, Any]:
        """
        Parse a single rule definition.

        Args:
            field_name: The field this rule applies to
            rule_def: The rule definition from YAML
            idx: Index of this rule for the field (for naming)

        Returns:
            Parsed rule dictionary

        Raises:
            ValueError: If rule definition is invalid
        """
        if "type" not in rule_def:
            raise ValueError(f"Rule for field '{field_name}' is missing 'type'")

        rule_type = rule_def["type"]
        rule_name = rule_def.get("name", f"{field_name}_{rule_type}_{idx}")
        parameters = rule_def.get("params", rule_def.get("parameters", {}))

        severity = rule_def.get("severity", "error")
        if severity not in ("error", "warning"):
            raise ValueError(f"Invalid severity '{severity}' for rule '{rule_name}'. Must be 'error' or 'warning'")

        return {
            "rule_name": rule_name,
            "rule_type": rule_type,
            "field_name": field_name,
            "parameters": parameters,
            "severity": severity,
            "enabled": rule_def.get("enabled", True),
        }


class RuleConfigBuilder:
    """
    Programmatically build rule configurations (default rules and tests).
    """

    def __init__(self):
        """Initialize empty rule configuration."""
        self.rules: list[dict[str, Any]] = []

    def _add(self, field_name: str, rule_type: str, suffix: str, parameters: dict[str, Any]) -> "RuleConfigBuilder":
        self.rules.append({
            "rule_name": f"{field_name}_{suffix}",
            "rule_type": rule_type,
            "field_name": field_name,
            "parameters": parameters,
            "severity": "error",
            "enabled": True,
        })
        return self

    def add_required_field(self, field_name: str, allow_empty_string: bool = False) -> "RuleConfigBuilder":
        """Add a required field rule."""
        return self._add(field_name, "required_field", "required", {"allow_empty_string": allow_empty_string})

    def add_type_check(
        self,
        field_name: str,
        expected_type: str,
        coerce: bool = True
    ) -> "RuleConfigBuilder":
        """Add a type check rule."""
        return self._add(field_name, "type_check", "type_check", {"expected_type": expected_type, "coerce": coerce})

    def add_range(
        self,
        field_name: str,
        min_value: float | str | None = None,
        max_value: float | str | None = None,
        min_exclusive: float | str | None = None,
    ) -> "RuleConfigBuilder":
        """Add a range validation rule."""
        params = {}
        if min_value is not None:
            params["min"] = min_value
        if max_value is not None:
            params["max"] = max_value
        if min_exclusive is not None:
            params["min_exclusive"] = min_exclusive
        return self._add(field_name, "range", "range", params)

    def add_positive(self, field_name: str, max_value: float | str | None = None) -> "RuleConfigBuilder":
        """Add a strictly-greater-than-zero rule, optionally capped."""
        return self.add_range(field_name, max_value=max_value, min_exclusive=0)

    def add_max_length(self, field_name: str, max_length: int) -> "RuleConfigBuilder":
        """Add a maximum text length rule."""
        return self._add(field_name, "length", "length", {"max_length": max_length})

    def add_regex(self, field_name: str, pattern: str, message: str | None = None) -> "RuleConfigBuilder":
        """Add a regex validation rule, optionally with a fixed failure message."""
        parameters = {"pattern": pattern}
        if message:
            parameters["message"] = message
        return self._add(field_name, "regex", "regex", parameters)

    def add_enum(self, field_name: str, allowed_values: tuple[str, ...] | list[str]) -> "RuleConfigBuilder":
        """Add an enumeration membership rule."""
        return self._add(field_name, "enum", "enum", {"allowed_values": list(allowed_values)})

    def add_date(self, field_name: str) -> "RuleConfigBuilder":
        """Add a DD/MM/YYYY date rule."""
        return self._add(field_name, "date", "date", {})

    def build(self) -> list[dict[str, Any]]:
        """Build and return the rule configuration."""
        return self.rules
