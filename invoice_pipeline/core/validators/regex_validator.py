"""
RegexValidator - checks free-text columns such as supplier_email against a
pattern.
"""

import re
from typing import Any

from .base_validator import BaseValidator


class RegexValidator(BaseValidator):
    """
    Validates that a string value matches a regular expression.

    Parameters:
    - pattern: Regular expression (string or compiled)
    - flags: Optional re flags, ignored for compiled patterns
    - message: Failure message reported instead of the pattern
    """

    rule_type = "regex"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        pattern = self.parameters.get("pattern")
        if not pattern:
            raise ValueError("RegexValidator requires 'pattern' parameter")

        if isinstance(pattern, re.Pattern):
            self.pattern = pattern
        elif isinstance(pattern, str):
            try:
                self.pattern = re.compile(pattern, self.parameters.get("flags", 0))
            except re.error as e:
                raise ValueError(f"Invalid regex pattern for {field_name}: {e}") from e
        else:
            raise ValueError(f"Pattern must be string or compiled Pattern, got {type(pattern).__name__}")

        self.message = self.parameters.get("message")

    def check(self, value: Any, record: dict[str, Any]) -> Any:
        text = str(value).strip()
        if self.pattern.match(text) is None:
            raise self.fail(self.message or f"Value '{text}' does not match pattern '{self.pattern.pattern}'")
        return value
