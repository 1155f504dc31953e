"""
LengthValidator - keeps text columns within the width of their table column.
"""

from typing import Any

from .base_validator import BaseValidator


class LengthValidator(BaseValidator):
    """
    Validates the character length of a string value.

    Parameters:
    - max_length: Longest accepted value (required)
    - min_length: Shortest accepted value (default 0)
    """

    rule_type = "length"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        if self.parameters.get("max_length") is None:
            raise ValueError("LengthValidator requires 'max_length' parameter")
        self.max_length = int(self.parameters["max_length"])
        self.min_length = int(self.parameters.get("min_length", 0))

    def check(self, value: Any, record: dict[str, Any]) -> Any:
        length = len(str(value))
        if length > self.max_length:
            raise self.fail(f"Must be at most {self.max_length} characters, got {length}")
        if length < self.min_length:
            raise self.fail(f"Must be at least {self.min_length} characters, got {length}")
        return value
