"""
DateValidator - parses DD/MM/YYYY strings into calendar dates.
"""

import re
from datetime import date, datetime
from typing import Any

from invoice_pipeline.core.constants import DATE_FORMAT, DATE_PATTERN

from .base_validator import BaseValidator


class DateValidator(BaseValidator):
    """
    Validates and coerces a date string.

    The string must match the configured pattern before any calendar
    conversion is attempted. A string that matches the pattern but names
    a day that does not exist (e.g. 31/02/2024) fails separately.

    Parameters:
    - pattern: Regex the raw string must match (default DD/MM/YYYY)
    - format: strptime format used for conversion (default %d/%m/%Y)
    """

    rule_type = "date"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.pattern = re.compile(self.parameters.get("pattern", DATE_PATTERN))
        self.date_format = self.parameters.get("format", DATE_FORMAT)

    def check(self, value: Any, record: dict[str, Any]) -> Any:
        """
        Returns:
            datetime.date parsed from the value

        Raises:
            ValidationError: With rule_name "date_format" when the string has the
                wrong shape, "date_value" when the day does not exist
        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        value_str = str(value).strip()
        if not self.pattern.match(value_str):
            raise self.fail("Date must be in DD/MM/YYYY format", rule_name="date_format")

        try:
            return datetime.strptime(value_str, self.date_format).date()
        except ValueError as e:
            raise self.fail(f"Invalid calendar date '{value_str}': {e}", rule_name="date_value") from e
