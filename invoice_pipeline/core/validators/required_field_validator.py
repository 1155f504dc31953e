"""
RequiredFieldValidator - ensures a field is present and not null/empty.
"""

from typing import Any

from .base_validator import BaseValidator


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a required field is present and not null/empty.

    Fails if:
    - Field is missing from the record
    - Field value is None
    - Field value is an empty string (configurable)
    """

    rule_type = "required_field"
    handles_missing = True

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.allow_empty_string = self.parameters.get("allow_empty_string", False)

    def check(self, value: Any, record: dict[str, Any]) -> Any:
        """
        Returns:
            The value, stripped of surrounding whitespace if it is a string
        """
        if self.field_name not in record:
            raise self.fail("Field is missing from record")

        if value is None:
            raise self.fail("Field value is null")

        if isinstance(value, str):
            value = value.strip()
            if not self.allow_empty_string and value == "":
                raise self.fail("Field value is empty string")

        return value
