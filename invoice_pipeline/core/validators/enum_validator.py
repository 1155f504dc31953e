"""
EnumValidator - validates that a value is one of a fixed set of allowed values.
"""

from typing import Any

from .base_validator import BaseValidator


class EnumValidator(BaseValidator):
    """
    Validates enumeration membership.

    Parameters:
    - allowed_values: List of accepted values
    - case_sensitive: Compare exactly (default True)
    """

    rule_type = "enum"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        allowed = self.parameters.get("allowed_values")
        if not allowed:
            raise ValueError("EnumValidator requires 'allowed_values' parameter")

        self.allowed_values = tuple(allowed)
        self.case_sensitive = self.parameters.get("case_sensitive", True)

    def check(self, value: Any, record: dict[str, Any]) -> Any:
        if self.case_sensitive:
            if value in self.allowed_values:
                return value
        else:
            for allowed in self.allowed_values:
                if str(value).upper() == str(allowed).upper():
                    return allowed

        raise self.fail(
            f"{self.field_name} must be one of the following: "
            f"{', '.join(str(v) for v in self.allowed_values)}"
        )
